"""Tests for resolve_agent.core.targets — target parsing and classification."""

from __future__ import annotations

import pytest

from resolve_agent.core.exceptions import TargetError
from resolve_agent.core.models import EnvFlavor, PackageKind, Target
from resolve_agent.core.targets import (
    check_for_common_invalid_packages,
    detect_common_typos,
    detect_package_kind_from_file,
    extract_package_name,
    is_installation_command,
    is_scientific_package,
    validate_resolve_query,
)


# ---------------------------------------------------------------------------
# Package specs
# ---------------------------------------------------------------------------

class TestExtractPackageName:
    @pytest.mark.parametrize(
        "spec, name",
        [
            ("react@18.2.0", "react"),
            ("requests==2.31.0", "requests"),
            ("requests>=2.0", "requests"),
            ("django<=4.2", "django"),
            ("@types/node@20.1.0", "@types/node"),
            ("flask", "flask"),
            ("six[extra]==1.16.0", "six"),
            ("uvicorn[standard]>=0.23", "uvicorn"),
            ("requests==2.31.0; python_version >= '3.8'", "requests"),
            ("tomli ; python_version < '3.11'", "tomli"),
        ],
    )
    def test_strips_version(self, spec, name):
        assert extract_package_name(spec) == name

    def test_target_package_name(self):
        target = Target(kind=PackageKind.NPM, spec="lodash@4.17.21")
        assert target.package_name == "lodash"


class TestTypos:
    def test_known_typo_is_corrected(self):
        assert detect_common_typos("reqests") == "requests"

    def test_version_is_kept(self):
        assert detect_common_typos("numby==1.26.0") == "numpy==1.26.0"
        assert detect_common_typos("sklearn==1.3.0") == "scikit-learn==1.3.0"

    def test_case_insensitive(self):
        assert detect_common_typos("Pandsa==2.1.0") == "pandas==2.1.0"

    def test_correct_name_is_not_a_typo(self):
        assert detect_common_typos("requests==2.31.0") is None


class TestScientific:
    def test_scientific(self):
        assert is_scientific_package("torch==2.1.0")
        assert is_scientific_package("NumPy==1.26.0")

    def test_not_scientific(self):
        assert not is_scientific_package("requests==2.31.0")


class TestInvalidPackages:
    def test_python_interpreter_via_pip(self):
        warning = check_for_common_invalid_packages(
            PackageKind.PYTHON, "python==3.11.0"
        )
        assert "cannot be installed via pip" in warning
        assert "pyenv install" in warning

    def test_node_via_pip(self):
        warning = check_for_common_invalid_packages(
            PackageKind.PYTHON, "node==18.17.0"
        )
        assert "Node.js cannot be installed" in warning

    def test_typo_suggestion(self):
        warning = check_for_common_invalid_packages(
            PackageKind.PYTHON, "numby==1.26.0"
        )
        assert "Did you mean 'numpy==1.26.0'?" in warning

    def test_python_via_npm(self):
        warning = check_for_common_invalid_packages(
            PackageKind.NPM, "python3==3.12.0"
        )
        assert "cannot be installed via npm" in warning

    def test_valid_packages(self):
        assert check_for_common_invalid_packages(
            PackageKind.PYTHON, "requests==2.31.0"
        ) is None
        assert check_for_common_invalid_packages(
            PackageKind.NPM, "react@18.2.0"
        ) is None


# ---------------------------------------------------------------------------
# validate_resolve_query
# ---------------------------------------------------------------------------

class TestValidateResolveQuery:
    @pytest.mark.parametrize(
        "kind, package",
        [
            (PackageKind.NPM, "react@18.2.0"),
            (PackageKind.PYTHON, "requests==2.31.0"),
            (PackageKind.PYTHON, "django>=4.0"),
        ],
    )
    def test_valid(self, kind, package):
        validate_resolve_query(kind, package)

    @pytest.mark.parametrize(
        "kind, package, message",
        [
            (PackageKind.PYTHON, "", "cannot be empty"),
            (PackageKind.PYTHON, "requests", "version specification"),
            (PackageKind.NPM, "react==18.2.0", "must use '@'"),
            (PackageKind.NPM, "node_modules@1.0", "Cannot install"),
            (PackageKind.PYTHON, "left-pad@1.3.0", "must use '=='"),
            (PackageKind.PYTHON, "pip==24.0", "Cannot install 'pip'"),
        ],
    )
    def test_invalid(self, kind, package, message):
        with pytest.raises(TargetError, match=message):
            validate_resolve_query(kind, package)


# ---------------------------------------------------------------------------
# detect_package_kind_from_file
# ---------------------------------------------------------------------------

class TestDetectPackageKind:
    @pytest.mark.parametrize(
        "filename, kind",
        [
            ("package.json", PackageKind.NPM),
            ("yarn.lock", PackageKind.NPM),
            ("requirements.txt", PackageKind.PYTHON),
            ("Pipfile", PackageKind.PYTHON),
            ("poetry.lock", PackageKind.PYTHON),
        ],
    )
    def test_by_name(self, tmp_path, filename, kind):
        path = tmp_path / filename
        path.write_text("")
        assert detect_package_kind_from_file(str(path)) == kind

    def test_by_npm_content(self, tmp_path):
        path = tmp_path / "deps.json"
        path.write_text('{"dependencies": {"react": "^18.2.0"}}')
        assert detect_package_kind_from_file(str(path)) == PackageKind.NPM

    def test_by_python_content(self, tmp_path):
        path = tmp_path / "deps.txt"
        path.write_text("flask==3.0.0\nrequests>=2.31\n")
        assert detect_package_kind_from_file(str(path)) == PackageKind.PYTHON

    def test_missing_file(self, tmp_path):
        with pytest.raises(TargetError, match="does not exist"):
            detect_package_kind_from_file(str(tmp_path / "nope.txt"))

    def test_unrecognized_content(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("just some notes")
        with pytest.raises(TargetError, match="Could not detect"):
            detect_package_kind_from_file(str(path))


# ---------------------------------------------------------------------------
# is_installation_command
# ---------------------------------------------------------------------------

class TestIsInstallationCommand:
    def test_pip_install_of_target(self, python_target):
        assert is_installation_command(
            "pip install requests==2.31.0", python_target
        )
        assert is_installation_command(
            "python -m pip install --no-cache-dir requests", python_target
        )

    def test_extras_target_matches_install_with_or_without_extras(self):
        target = Target(kind=PackageKind.PYTHON, spec="six[extra]==1.16.0")
        assert is_installation_command("pip install six==1.16.0", target)
        assert is_installation_command(
            "pip install 'six[extra]==1.16.0'", target
        )

    def test_pip_requirements_counts(self, python_target):
        assert is_installation_command(
            "pip install -r requirements.txt", python_target
        )

    def test_other_commands_are_not_installs(self, python_target):
        assert not is_installation_command("pip show requests", python_target)
        assert not is_installation_command(
            "pip install urllib3==1.26.18", python_target
        )
        assert not is_installation_command(
            "pip uninstall -y requests", python_target
        )

    def test_conda_only_counts_in_conda_env(self, python_target, conda_target):
        assert is_installation_command("conda install numpy", conda_target)
        assert not is_installation_command(
            "conda install requests", python_target
        )

    def test_npm_package(self, npm_target):
        assert is_installation_command("npm install react@18.2.0", npm_target)
        assert not is_installation_command("npm install", npm_target)
        assert not is_installation_command("npm cache clean", npm_target)

    def test_npm_file_mode(self):
        target = Target(
            kind=PackageKind.NPM, spec="package.json", file_mode=True
        )
        assert is_installation_command("npm install", target)
        assert is_installation_command("npm ci", target)
        assert not is_installation_command("npm install lodash", target)

    def test_python_file_mode(self, requirements_target):
        assert is_installation_command(
            "pip install -r requirements.txt", requirements_target
        )
        assert not is_installation_command(
            "pip install requests", requirements_target
        )

    def test_conda_file_mode(self):
        target = Target(
            kind=PackageKind.PYTHON,
            spec="requirements.txt",
            file_mode=True,
            env=EnvFlavor.CONDA,
        )
        assert is_installation_command(
            "conda install --file requirements.txt", target
        )
        assert is_installation_command(
            "conda install --file environment.yml", target
        )

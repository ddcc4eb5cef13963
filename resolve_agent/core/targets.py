"""Target helpers — package specs, dependency files and install detection."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from resolve_agent.core.exceptions import TargetError
from resolve_agent.core.models import EnvFlavor, PackageKind, Target

logger = logging.getLogger(__name__)

NPM_MANIFESTS = frozenset({"package.json", "package-lock.json", "yarn.lock"})
PYTHON_MANIFESTS = frozenset(
    {"requirements.txt", "poetry.lock", "pipfile", "pipfile.lock"}
)

COMMON_TYPOS = {
    "numby": "numpy",
    "numpie": "numpy",
    "numbpy": "numpy",
    "pandsa": "pandas",
    "panda": "pandas",
    "scikitlearn": "scikit-learn",
    "sklearn": "scikit-learn",
    "matplot": "matplotlib",
    "plotlib": "matplotlib",
    "tensorlow": "tensorflow",
    "tensrflow": "tensorflow",
    "reqests": "requests",
    "reqeusts": "requests",
    "beautifulsoup": "beautifulsoup4",
    "bs4": "beautifulsoup4",
    "pil": "pillow",
}

SCIENTIFIC_PACKAGES = frozenset({
    "pytorch", "torch", "torchvision", "tensorflow", "tf-nightly",
    "numpy", "scipy", "pandas", "scikit-learn", "sklearn",
    "matplotlib", "seaborn", "plotly", "bokeh",
    "jupyter", "ipython", "notebook", "jupyterlab",
    "conda", "anaconda", "miniconda",
})

INTERPRETER_PREFIXES = ("python==", "python3==")

_VERSION_SEPARATORS = re.compile(r"[\[;@=<>!~]")


def extract_package_name(package: str) -> str:
    """Strip the version part: ``react@18.2.0`` -> ``react``.

    Pip extras (``six[extra]``) and environment markers (``; ...``) are
    dropped too. A leading ``@`` is an npm scope and stays part of the name.
    """
    scope = "@" if package.startswith("@") else ""
    rest = package[len(scope):]
    return scope + _VERSION_SEPARATORS.split(rest, maxsplit=1)[0].strip()


def is_interpreter_package(package: str) -> bool:
    return package.startswith(INTERPRETER_PREFIXES)


def is_scientific_package(package: str) -> bool:
    return extract_package_name(package).lower() in SCIENTIFIC_PACKAGES


def detect_common_typos(package: str) -> Optional[str]:
    """Return the corrected spec for a well-known misspelling, else None."""
    name = extract_package_name(package).lower()
    corrected = COMMON_TYPOS.get(name)
    if corrected is None:
        return None
    if "==" in package:
        return f"{corrected}=={package.split('==', 1)[1]}"
    return corrected


def check_for_common_invalid_packages(
    kind: PackageKind, package: str
) -> Optional[str]:
    """Return a warning for packages the package manager cannot install."""
    if kind == PackageKind.PYTHON:
        if is_interpreter_package(package):
            return (
                f"Package '{package}' is invalid. Python interpreter versions "
                f"cannot be installed via pip.\n\n"
                f"Use these alternatives instead (pyenv preferred):\n"
                f"  - pyenv: pyenv install 3.13.3 && pyenv global 3.13.3\n"
                f"  - macOS: brew install python@3.13\n"
                f"  - conda: conda install python=3.13\n"
                f"  - Check your current Python: python --version"
            )
        if package.startswith("node=="):
            return (
                f"Package '{package}' is invalid. Node.js cannot be installed "
                f"via pip.\n\n"
                f"Use these alternatives instead:\n"
                f"  - nvm: nvm install 18.17.0\n"
                f"  - brew: brew install node@18\n"
                f"  - Download from nodejs.org"
            )
        corrected = detect_common_typos(package)
        if corrected:
            return (
                f"Package '{package}' may be a typo. "
                f"Did you mean '{corrected}'?\n\n"
                f"If you meant '{corrected}', use:\n"
                f"  - pip install {corrected}\n"
                f"  - conda install {corrected}"
            )
    elif kind == PackageKind.NPM and is_interpreter_package(package):
        return (
            f"Package '{package}' is invalid. Python cannot be installed "
            f"via npm.\n\n"
            f"Use these alternatives instead (pyenv preferred):\n"
            f"  - pyenv: pyenv install 3.13.3\n"
            f"  - macOS: brew install python@3.13\n"
            f"  - conda: conda install python=3.13"
        )
    return None


def validate_resolve_query(kind: PackageKind, package: str) -> None:
    """Reject package specs that cannot be resolved.

    Raises:
        TargetError: With a message describing the expected format.
    """
    if not package:
        raise TargetError("Package name cannot be empty")

    if not any(sep in package for sep in ("@", "==", ">=", "<=")):
        raise TargetError(
            "Package must include version specification. Use format: "
            "'package@version' for npm or 'package==version' for Python"
        )

    package_lower = package.lower()
    if kind == PackageKind.NPM:
        if "@" not in package:
            raise TargetError(
                "NPM packages must use '@' for version specification "
                "(e.g., 'react@18.2.0')"
            )
        if "node_modules" in package_lower or "package.json" in package_lower:
            raise TargetError(
                "Invalid package name. Cannot install 'node_modules' or "
                "'package.json'"
            )
    else:
        if not any(sep in package for sep in ("==", ">=", "<=")):
            raise TargetError(
                "Python packages must use '==' for exact version or "
                "'>=' / '<=' for version ranges (e.g., 'requests==2.31.0')"
            )
        if "pip" in package_lower or "setuptools" in package_lower:
            raise TargetError(
                "Invalid package name. Cannot install 'pip' or 'setuptools' "
                "as regular packages"
            )


def detect_package_kind_from_file(file_path: str) -> PackageKind:
    """Work out which package manager a dependency file belongs to."""
    path = Path(file_path)
    if not path.exists():
        raise TargetError(f"Dependency file '{file_path}' does not exist")

    name = path.name.lower()
    logger.debug("Detecting package manager for %s", name)
    if name in NPM_MANIFESTS:
        return PackageKind.NPM
    if name in PYTHON_MANIFESTS:
        return PackageKind.PYTHON

    try:
        content = path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise TargetError(f"Could not read file '{file_path}'") from e

    if '"dependencies"' in content or '"devDependencies"' in content:
        return PackageKind.NPM
    if any(op in content for op in ("==", ">=", "<=")):
        return PackageKind.PYTHON

    raise TargetError(
        f"Could not detect package manager type from file '{file_path}'. "
        f"Supported files: package.json, requirements.txt, yarn.lock, "
        f"poetry.lock, Pipfile"
    )


def is_installation_command(command: str, target: Target) -> bool:
    """True if *command* tries to install the session's target."""
    cmd = command.lower()
    conda = target.env == EnvFlavor.CONDA

    if target.file_mode:
        if target.kind == PackageKind.NPM:
            if cmd.strip() in ("npm install", "npm ci"):
                return True
            return "npm install" in cmd and (
                "package.json" in cmd or "yarn.lock" in cmd
            )
        manifests = ("requirements.txt", "poetry.lock", "pipfile")
        if "pip install" in cmd:
            return any(m in cmd for m in manifests)
        if conda and "conda install" in cmd:
            return any(m in cmd for m in manifests + ("environment.yml",))
        return False

    name = target.package_name.lower()
    if target.kind == PackageKind.NPM:
        return "npm install" in cmd and (name in cmd or "package.json" in cmd)
    if "pip install" in cmd:
        return name in cmd or "requirements.txt" in cmd
    if conda and "conda install" in cmd:
        return name in cmd
    return False

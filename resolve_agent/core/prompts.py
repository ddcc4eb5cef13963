"""Prompt builders for the initial plan and for replanning after failures."""

from __future__ import annotations

from typing import Optional

from resolve_agent.core.models import (
    EnvFlavor,
    ErrorHistory,
    PackageKind,
    Target,
)
from resolve_agent.core.targets import (
    is_interpreter_package,
    is_scientific_package,
)

_PYTHON_VIA_SYSTEM = (
    "- pyenv: pyenv install 3.13.3 && pyenv global 3.13.3 (RECOMMENDED)\n"
    "- macOS: brew install python@3.13\n"
    "- conda: conda install python=3.13"
)
_NODE_VIA_SYSTEM = (
    "- nvm: nvm install 18.17.0\n"
    "- brew: brew install node@18"
)

_FOCUS = (
    "Analyze these errors and provide ONLY executable {pm} commands to fix "
    "the issues. Focus on:\n"
    "1. Version conflicts - suggest removing conflicting packages before "
    "installing\n"
    "2. Invalid package names - if 'No matching distribution found', suggest "
    "correct alternatives\n"
    "3. Missing system dependencies (headers, libraries, compilers)\n"
    "4. Package manager configuration issues\n"
    "5. Build environment problems\n\n"
    "For version conflicts, ALWAYS suggest uninstalling conflicting packages "
    "first."
)


def _upfront_warning(target: Target) -> str:
    """Warnings added to the first request for packages known to be wrong."""
    spec = target.spec
    if target.kind == PackageKind.PYTHON:
        if is_interpreter_package(spec):
            return (
                f"\n\nWARNING: '{spec}' is NOT a pip package. Python "
                f"interpreter versions must be installed using system package "
                f"managers:\n{_PYTHON_VIA_SYSTEM}\n\n"
                f"Generate system installation commands instead of pip "
                f"commands."
            )
        if spec.startswith("node=="):
            return (
                f"\n\nWARNING: '{spec}' is NOT a pip package. Node.js must be "
                f"installed using:\n{_NODE_VIA_SYSTEM}\n\n"
                f"Generate Node.js installation commands instead of pip "
                f"commands."
            )
        if is_scientific_package(spec):
            return ""
        if target.env == EnvFlavor.CONDA:
            return (
                f"\n\nNOTE: Using conda environment as specified:\n"
                f"- conda install {target.package_name}"
            )
        return (
            f"\n\nNOTE: Using pip (default) for Python packages:\n"
            f"- pip install {target.package_name}"
        )
    if is_interpreter_package(spec):
        return (
            f"\n\nWARNING: '{spec}' is NOT an npm package. Python must be "
            f"installed using:\n{_PYTHON_VIA_SYSTEM}\n\n"
            f"Generate Python installation commands instead of npm commands."
        )
    return ""


def _replan_guidance(target: Target) -> str:
    """Extra guidance for replanning, keyed on the target's shape."""
    spec = target.spec
    name = target.package_name
    conda = target.env == EnvFlavor.CONDA

    if target.kind == PackageKind.NPM:
        if is_interpreter_package(spec):
            return (
                "\n\nDETECTED INVALID PACKAGE: Python cannot be installed via "
                "npm. Use:\n"
                "- conda: conda install python=3.13 (RECOMMENDED)\n"
                "- pyenv: pyenv install 3.13.3\n"
                "- macOS: brew install python@3.13"
            )
        return ""

    if is_interpreter_package(spec):
        return (
            "\n\nDETECTED INVALID PACKAGE: Python interpreter versions cannot "
            "be installed via pip. Use system package managers instead:\n"
            "- conda: conda install python=3.13 (RECOMMENDED)\n"
            "- pyenv: pyenv install 3.13.3 && pyenv global 3.13.3\n"
            "- macOS: brew install python@3.13"
        )
    if spec.startswith("node=="):
        return (
            "\n\nDETECTED INVALID PACKAGE: Node.js cannot be installed via "
            f"pip. Use:\n{_NODE_VIA_SYSTEM}\n- Download from nodejs.org"
        )
    if target.file_mode:
        return ""
    if conda:
        suggestion = (
            f"\n\nSUGGESTION: Try conda alternatives:\n"
            f"- conda install {name}"
        )
        if is_scientific_package(spec):
            suggestion += f"\n- conda install -c conda-forge {name}"
        return suggestion
    return (
        f"\n\nSUGGESTION: Try pip alternatives:\n"
        f"- pip install {name}\n"
        f"- pip install --no-cache-dir {name}"
    )


def build_initial_prompt(target: Target) -> str:
    """Ask for the basic installation command only."""
    pm = target.package_manager
    kind = target.kind.value

    if target.file_mode:
        return (
            f"Generate the BASIC installation command for {kind} file "
            f"'{target.spec}' using {pm}. Start with the standard installation "
            f"command only. Do NOT include cache clearing, purging, or force "
            f"reinstall commands - these will be used only if the basic "
            f"installation fails. Provide ONLY the basic executable command."
        )

    return (
        f"Generate the BASIC installation command for {kind} package "
        f"'{target.spec}' using {pm}. Start with the standard installation "
        f"command only (e.g., '{pm} install {target.spec}'). Do NOT include "
        f"cache clearing, purging, upgrade pip, or force reinstall commands - "
        f"these will be used only if the basic installation fails. Provide "
        f"ONLY the basic executable command.{_upfront_warning(target)}"
    )


def build_replan_prompt(
    target: Target,
    errors: ErrorHistory,
    loop_breaker: Optional[str] = None,
) -> str:
    """Ask for corrective commands given everything that has failed so far."""
    pm = target.package_manager
    kind = target.kind.value
    subject = target.describe()

    prompt = (
        f"The following errors occurred while trying to install {subject} "
        f"({kind}) using {pm}:\n\n"
        f"{errors.summary()}\n\n"
        f"{_FOCUS.format(pm=pm)}\n"
    )
    if not target.file_mode:
        prompt += (
            "For invalid packages like 'python==X.X.X', suggest system "
            "installation methods instead."
        )
        if target.kind == PackageKind.PYTHON:
            if target.env == EnvFlavor.CONDA:
                prompt += "\nUsing conda environment as specified by user."
            else:
                prompt += (
                    "\nUsing pip environment as specified by user (default)."
                )
        prompt += "\n"

    prompt += (
        f"Provide ONLY {pm} executable commands, one per line, NO "
        f"explanations. Do NOT suggest alternative package managers."
        f"{_replan_guidance(target)}"
    )

    if loop_breaker:
        prompt += f"\n\n{loop_breaker}"
    return prompt

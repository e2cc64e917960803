# -*- coding: utf-8 -*-
"""Runtime dependency pre-check, run before anything imports PyQt5."""
from __future__ import annotations

from importlib.util import find_spec

# pip name -> import name
RUNTIME_PACKAGES = {
    "PyQt5": "PyQt5",
}


def missing_runtime_packages() -> list[str]:
    return [pip_name for pip_name, module in RUNTIME_PACKAGES.items() if find_spec(module) is None]


def ensure_runtime_deps() -> None:
    """Raise RuntimeError naming what to install when a runtime package is absent."""
    missing = missing_runtime_packages()
    if missing:
        raise RuntimeError(
            f"MediaStudio needs: {', '.join(missing)}.\n\n"
            "Install the project with:\n"
            "  pip install -e ."
        )

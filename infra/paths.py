# -*- coding: utf-8 -*-
"""
Centralized path resolver for:
- Bundled resources (dev + PyInstaller)
- Per-user writable data (no admin required)
- Portable mode (everything beside the application)
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

APP_NAME = "MediaStudio"

_portable = False


def set_portable_mode(enabled: bool) -> None:
    global _portable
    _portable = bool(enabled)


def _is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False)) and hasattr(sys, "_MEIPASS")


def app_root() -> Path:
    """
    Root used to locate packaged resources.

    - PyInstaller: sys._MEIPASS points to the extraction dir.
    - Dev: project root (parent of this 'infra' folder).
    """
    if _is_frozen():
        return Path(getattr(sys, "_MEIPASS"))  # type: ignore[arg-type]
    return Path(__file__).resolve().parents[1]


def resources_dir() -> Path:
    root = app_root()
    cand = root / "resources"
    return cand if cand.exists() else root


def resource_path(rel: str) -> Path:
    return resources_dir() / rel


def user_data_dir() -> Path:
    """
    Per-user writable directory.

    STUDIO_CONFIG_DIR wins; portable mode keeps data under the app root.
    Otherwise LOCALAPPDATA/APPDATA (Windows), XDG_CONFIG_HOME, then home.
    """
    override = os.getenv("STUDIO_CONFIG_DIR")
    if override:
        p = Path(override)
    elif _portable:
        p = app_root() / "config" / APP_NAME
    else:
        base = (
            os.getenv("LOCALAPPDATA")
            or os.getenv("APPDATA")
            or os.getenv("XDG_CONFIG_HOME")
            or str(Path.home() / ".config")
        )
        p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p


def ensure_dir(p: Path) -> Path:
    p.mkdir(parents=True, exist_ok=True)
    return p


def logs_dir() -> Path:
    return ensure_dir(user_data_dir() / "logs")


def profiles_dir() -> Path:
    return user_data_dir() / "basic" / "profiles"


def scenes_dir() -> Path:
    return user_data_dir() / "basic" / "scenes"


def plugins_dir() -> Path:
    return user_data_dir() / "plugins"


def user_config_path() -> Path:
    return user_data_dir() / "user.ini"

# -*- coding: utf-8 -*-
"""storage/entity_paths.py

File and directory names for profiles and scene collections.

Display names are free text; on disk they become portable file names, made
unique inside their folder. This module does NOT depend on PyQt.
"""

from __future__ import annotations

import re
from pathlib import Path

_INVALID = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

FALLBACK_NAME = "Untitled"


def safe_file_name(name: str) -> str:
    """'My: Profile' -> 'My_ Profile'. Empty or dot-only names fall back."""
    cleaned = _INVALID.sub("_", (name or "").strip()).strip(" .")
    return cleaned or FALLBACK_NAME


def unused_path(folder: Path, name: str, ext: str = "") -> Path:
    """First free ``folder/<name>[ N]<ext>`` for a display name."""
    base = safe_file_name(name)
    candidate = Path(folder) / f"{base}{ext}"
    n = 2
    while candidate.exists():
        candidate = Path(folder) / f"{base} {n}{ext}"
        n += 1
    return candidate


# -*- coding: utf-8 -*-
"""Scene collection document I/O.

The document body (scenes, sources) is opaque to the bootstrap; only ``name``,
``current_scene``, ``current_program_scene`` and ``scene_order`` are read.

Writes go to ``<file>.tmp`` then replace the target; the previous good copy is
kept as ``<file>.bak`` and used when the main file cannot be parsed.
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Any, Dict, Optional

from storage.config_store import discard_file

log = logging.getLogger(__name__)

DEFAULT_SCENE_NAME = "Scene"


class DocumentError(Exception):
    pass


def write_json_atomic(path: Path, data: Dict[str, Any], *, backup: bool = False) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    payload = json.dumps(data, indent=2, ensure_ascii=False)
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        if backup and path.exists():
            shutil.copy2(path, path.with_name(path.name + ".bak"))
        os.replace(tmp, path)
    except OSError:
        discard_file(tmp)
        raise


def new_document(name: str) -> Dict[str, Any]:
    scene = {"name": DEFAULT_SCENE_NAME, "id": "scene", "settings": {"items": []}}
    return {
        "name": name,
        "current_scene": DEFAULT_SCENE_NAME,
        "current_program_scene": DEFAULT_SCENE_NAME,
        "scene_order": [{"name": DEFAULT_SCENE_NAME}],
        "sources": [scene],
        "created": time.time(),
    }


def _read(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("document root is not an object")
    return data


def load_document(path: Path) -> Dict[str, Any]:
    """Load a collection document, falling back to its ``.bak`` copy."""
    path = Path(path)
    try:
        return _read(path)
    except (OSError, ValueError) as e:
        backup = path.with_name(path.name + ".bak")
        if backup.exists():
            log.warning("Scene collection %s unreadable (%s); using backup", path.name, e)
            try:
                return _read(backup)
            except (OSError, ValueError):
                log.debug("Backup unreadable too", exc_info=True)
        raise DocumentError(f"Cannot load scene collection {path}: {e}") from e


def read_name(path: Path) -> Optional[str]:
    """Display name stored in a document, or None when unreadable."""
    try:
        name = _read(Path(path)).get("name")
    except (OSError, ValueError):
        return None
    name = str(name or "").strip()
    return name or None


def current_scenes(doc: Dict[str, Any]) -> tuple:
    """(current_scene, current_program_scene) of a document, first scene as fallback."""
    order = doc.get("scene_order") or []
    first = ""
    if isinstance(order, list) and order and isinstance(order[0], dict):
        first = str(order[0].get("name") or "")
    scene = str(doc.get("current_scene") or first)
    program = str(doc.get("current_program_scene") or scene)
    return scene, program

# -*- coding: utf-8 -*-
"""Application version, read once from ``version.json`` at the repo root.

The bootstrap compares it with ``General/LastVersion`` to detect upgrades.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

log = logging.getLogger(__name__)

VERSION_FILE = Path(__file__).resolve().parents[1] / "version.json"
UNKNOWN_VERSION = "0.0.0"


@lru_cache(maxsize=1)
def get_version() -> str:
    try:
        data = json.loads(VERSION_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("version.json missing or unreadable; reporting %s", UNKNOWN_VERSION)
        return UNKNOWN_VERSION
    return str(data.get("semver") or UNKNOWN_VERSION)


__version__ = get_version()

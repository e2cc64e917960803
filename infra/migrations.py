# -*- coding: utf-8 -*-
"""Per-version migrations of the global user config (``user.ini``).

Why this exists:
- Installers overwrite the app folder on upgrade
- Per-user data survives, and defaults that changed between releases must not
  silently alter what an existing user already sees.

Design principles:
- Never brick startup: an unparseable version means "no previous version"
- Idempotent: runs once per app version, tracked by General/LastVersion
- Only sets flags for *upgrading* users; fresh installs get current defaults
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from core.keys import GeneralKeys, Sections
from storage.config_store import ConfigStore

log = logging.getLogger(__name__)

Version = Tuple[int, int, int]

# (flag key, first version that no longer needs it)
LEGACY_DEFAULT_FLAGS: List[Tuple[str, Version]] = [
    (GeneralKeys.PRE19_DEFAULTS, (19, 0, 0)),
    (GeneralKeys.PRE21_DEFAULTS, (21, 0, 0)),
    (GeneralKeys.PRE23_DEFAULTS, (23, 0, 0)),
    (GeneralKeys.PRE24_1_DEFAULTS, (24, 1, 0)),
]


def parse_version(text: Optional[str]) -> Optional[Version]:
    """'27.1.3' -> (27, 1, 3). Suffixes like '-beta2' are ignored."""
    if not text:
        return None
    core = str(text).strip().split("-", 1)[0].split("+", 1)[0]
    parts = core.split(".")
    nums = []
    for part in parts[:3]:
        if not part.isdigit():
            return None
        nums.append(int(part))
    while len(nums) < 3:
        nums.append(0)
    return nums[0], nums[1], nums[2]


def migrate_user_config(cfg: ConfigStore, current_version: str) -> bool:
    """Set legacy-defaults flags for upgrading users. Returns True if changed."""
    g = Sections.GENERAL
    last_raw = cfg.get_user_raw(g, GeneralKeys.LAST_VERSION)
    if last_raw == current_version:
        return False

    last = parse_version(last_raw)
    if last is not None:
        for flag, threshold in LEGACY_DEFAULT_FLAGS:
            if last < threshold and not cfg.has_user_value(g, flag):
                cfg.set(g, flag, True)
                log.info("Upgrade from %s: %s enabled", last_raw, flag)
    elif last_raw:
        log.warning("Unrecognized LastVersion '%s'; treating as fresh install", last_raw)

    cfg.set(g, GeneralKeys.LAST_VERSION, current_version)
    return True

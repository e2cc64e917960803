# -*- coding: utf-8 -*-
"""
Global user configuration (``user.ini``) stored in the per-user writable folder.

Holds what is shared by every profile: the last active profile / scene
collection, legacy-defaults flags and the first-run marker. Profile-specific
settings live in each profile's ``basic.ini``.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from core.keys import BasicKeys, GeneralKeys, Sections, VideoKeys
from infra.paths import profiles_dir, scenes_dir, user_config_path
from storage.config_store import ConfigStore

log = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "Untitled"
DEFAULT_COLLECTION_NAME = "Untitled"


def _install_user_defaults(cfg: ConfigStore) -> None:
    cfg.set_default(Sections.GENERAL, GeneralKeys.FIRST_RUN, False)
    cfg.set_default(Sections.GENERAL, GeneralKeys.PRE19_DEFAULTS, False)
    cfg.set_default(Sections.GENERAL, GeneralKeys.PRE21_DEFAULTS, False)
    cfg.set_default(Sections.GENERAL, GeneralKeys.PRE23_DEFAULTS, False)
    cfg.set_default(Sections.GENERAL, GeneralKeys.PRE24_1_DEFAULTS, False)
    cfg.set_default(Sections.BASIC, BasicKeys.PROFILE, DEFAULT_PROFILE_NAME)
    cfg.set_default(Sections.BASIC, BasicKeys.SCENE_COLLECTION, DEFAULT_COLLECTION_NAME)
    cfg.set_default(Sections.VIDEO, VideoKeys.ADAPTER_IDX, 0)


def load_user_config(path: Optional[Path] = None) -> ConfigStore:
    """Open the global config. A missing file yields an empty store.

    Raises ConfigStoreError when the file exists but is unreadable; the
    bootstrap treats that as the fatal basic-config load failure.
    """
    cfg = ConfigStore.open(path or user_config_path())
    _install_user_defaults(cfg)
    return cfg


def repair_user_space() -> None:
    """Reset the global config; profiles and scene collections are kept.

    Intended for installer shortcuts like 'Repair installation'.
    """
    p = user_config_path()
    if p.exists():
        backup = p.with_name(p.name + ".repair.bak")
        shutil.copy2(p, backup)
        p.unlink()
        log.warning("user.ini reset (previous copy kept at %s)", backup)
    profiles_dir().mkdir(parents=True, exist_ok=True)
    scenes_dir().mkdir(parents=True, exist_ok=True)

# -*- coding: utf-8 -*-
"""Session state threaded through the bootstrap stages.

There is no ambient "current profile" singleton: each stage receives the
session value and returns an updated copy (``dataclasses.replace``), so there
is exactly one writer at a time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from storage.config_store import ConfigStore

if TYPE_CHECKING:  # pragma: no cover
    from services.profiles import Profile
    from services.registry import Resolution
    from services.scene_collections import SceneCollection
    from services.service_settings import ServiceSettings

log = logging.getLogger(__name__)


class BootstrapState(str, Enum):
    STARTING = "starting"
    CONFIG_LOADED = "config_loaded"
    DEFAULTS_INSTALLED = "defaults_installed"
    AUDIO_READY = "audio_ready"
    VIDEO_READY = "video_ready"
    MODULES_LOADED = "modules_loaded"
    PROFILE_ACTIVE = "profile_active"
    COLLECTION_ACTIVE = "collection_active"
    UI_VISIBLE = "ui_visible"


@dataclass(frozen=True)
class LaunchOptions:
    """Command-line equivalent overrides (see ``app/cli.py``)."""

    profile: str = ""
    collection: str = ""
    safe_mode: bool = False
    disable_third_party: bool = False
    portable: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class SessionState:
    user_config: ConfigStore
    options: LaunchOptions = LaunchOptions()
    state: BootstrapState = BootstrapState.STARTING

    # resolved at config load, published as active after modules load
    profile_resolution: Optional["Resolution"] = None
    profile: Optional["Profile"] = None
    profile_created: bool = False
    config: Optional[ConfigStore] = None

    scene_collection: Optional["SceneCollection"] = None
    collection_created: bool = False
    document: Optional[Dict[str, Any]] = None

    service: Optional["ServiceSettings"] = None
    failed_modules: Tuple[str, ...] = ()
    first_run: bool = False
    # gates saves until the whole pass completed
    loaded: bool = False


def save_session(session: SessionState) -> bool:
    """Persist the active profile config and the global config.

    Refused (returns False) until the bootstrap has finished loading, so a
    half-initialised session can never overwrite good files.
    """
    if not session.loaded:
        log.debug("save_session ignored: session not loaded yet")
        return False
    if session.config is not None:
        session.config.save_safe("tmp")
    session.user_config.save_safe("tmp", "bak")
    return True


def title_bar_text(session: SessionState, version: str, *, studio_mode: bool = False) -> str:
    parts = ["MediaStudio "]
    if studio_mode:
        parts.append("Studio ")
    parts.append(version)
    if session.options.safe_mode:
        parts.append(" (Safe Mode)")
    if session.options.portable:
        parts.append(" - Portable Mode")
    profile = session.profile.name if session.profile else ""
    collection = session.scene_collection.name if session.scene_collection else ""
    parts.append(f" - Profile: {profile}")
    parts.append(f" - Scenes: {collection}")
    return "".join(parts)

# -*- coding: utf-8 -*-
"""services/errors.py

Error taxonomy for the bootstrap (no PyQt dependency).

- Fatal errors derive from ``BootstrapError`` and carry a ``FailureCause``;
  each cause maps to exactly one human-readable message.
- Recoverable per-item problems (module load failures) are ``Issue`` records.
- Nothing here is caught-and-retried; retry is a user-initiated restart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Level(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Issue:
    level: Level
    code: str
    message: str
    field: Optional[str] = None


class FailureCause(str, Enum):
    BASIC_CONFIG_LOAD = "basic_config_load"
    AUDIO_RESET = "audio_reset"
    VIDEO_MODULE_NOT_FOUND = "video_module_not_found"
    VIDEO_NOT_SUPPORTED = "video_not_supported"
    VIDEO_INVALID_PARAM = "video_invalid_param"
    VIDEO_UNKNOWN = "video_unknown"
    SERVICE_INIT = "service_init"
    PROFILE_STORAGE = "profile_storage"
    SCENE_COLLECTION_STORAGE = "scene_collection_storage"
    BUILD_CONFIG = "build_config"


FAILURE_MESSAGES = {
    FailureCause.BASIC_CONFIG_LOAD: "Failed to load basic.ini",
    FailureCause.AUDIO_RESET: "Failed to initialize audio",
    FailureCause.VIDEO_MODULE_NOT_FOUND: "Failed to initialize video:  Graphics module not found",
    FailureCause.VIDEO_NOT_SUPPORTED: (
        "Failed to initialize video:\n\nRequired graphics API functionality "
        "not found.  Your GPU may not be supported."
    ),
    FailureCause.VIDEO_INVALID_PARAM: "Failed to initialize video:  Invalid parameters",
    FailureCause.VIDEO_UNKNOWN: (
        "Failed to initialize video.  Your GPU may not be supported, "
        "or your graphics drivers may need to be updated."
    ),
    FailureCause.SERVICE_INIT: "Failed to initialize service",
    FailureCause.PROFILE_STORAGE: "Failed to open the profile storage",
    FailureCause.SCENE_COLLECTION_STORAGE: "Failed to open the scene collection storage",
    FailureCause.BUILD_CONFIG: "Invalid build configuration",
}


class BootstrapError(Exception):
    """Fatal bootstrap failure. ``str(err)`` is the user-facing message."""

    def __init__(self, cause: FailureCause, detail: str = "") -> None:
        self.cause = cause
        self.detail = detail
        super().__init__(FAILURE_MESSAGES[cause])

    @property
    def message(self) -> str:
        return FAILURE_MESSAGES[self.cause]


class ConfigLoadError(BootstrapError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(FailureCause.BASIC_CONFIG_LOAD, detail)


class AudioInitError(BootstrapError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(FailureCause.AUDIO_RESET, detail)


class VideoInitError(BootstrapError):
    pass


class ServiceInitError(BootstrapError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(FailureCause.SERVICE_INIT, detail)


class StorageError(BootstrapError):
    """Profile / scene collection storage cannot be opened."""


class BuildConfigError(BootstrapError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(FailureCause.BUILD_CONFIG, detail)

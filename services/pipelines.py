# -*- coding: utf-8 -*-
"""Headless pipeline collaborators.

Stand-ins for the compositor / audio engine when the application runs without
a native media backend (CI, smoke runs). They validate the
parameter blocks the resetters build and remember the last applied state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Set

from services.subsystems import AudioInfo, InitResult, VideoInfo

log = logging.getLogger(__name__)

SUPPORTED_GRAPHICS_MODULES = {"opengl", "d3d11", "metal"}
SUPPORTED_SAMPLE_RATES = {44100, 48000}
MAX_DIMENSION = 16384


@dataclass
class HeadlessVideoPipeline:
    graphics_modules: Set[str] = field(default_factory=lambda: set(SUPPORTED_GRAPHICS_MODULES))
    current: Optional[VideoInfo] = None

    def reset_video(self, info: VideoInfo) -> int:
        if info.graphics_module not in self.graphics_modules:
            return InitResult.MODULE_NOT_FOUND
        dims = (info.base_width, info.base_height, info.output_width, info.output_height)
        if any(d <= 0 or d > MAX_DIMENSION for d in dims):
            return InitResult.INVALID_PARAM
        if info.fps_num <= 0 or info.fps_den <= 0:
            return InitResult.INVALID_PARAM
        self.current = info
        return InitResult.SUCCESS


@dataclass
class HeadlessAudioPipeline:
    current: Optional[AudioInfo] = None
    monitoring_device: Optional[tuple] = None

    def reset_audio(self, info: AudioInfo) -> bool:
        if info.samples_per_sec not in SUPPORTED_SAMPLE_RATES:
            log.error("Unsupported sample rate: %d", info.samples_per_sec)
            return False
        self.current = info
        return True

    def monitoring_available(self) -> bool:
        return True

    def set_monitoring_device(self, name: str, device_id: str) -> bool:
        self.monitoring_device = (name, device_id)
        return True

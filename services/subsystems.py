# -*- coding: utf-8 -*-
"""Video / audio subsystem resetters.

Each resetter turns a ConfigStore snapshot into the parameter block of its
pipeline collaborator and invokes the pipeline reset. Result codes are passed
back verbatim; interpretation (fatal or not, which message) belongs to the
bootstrap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Protocol, Tuple

from app.events import CanvasResized, EventBus, OutputResized
from core.keys import AudioKeys as A
from core.keys import Sections as S
from core.keys import VideoKeys as V
from core.types import ScaleType
from infra.perf import span
from storage.config_store import ConfigStore

log = logging.getLogger(__name__)


class InitResult(IntEnum):
    SUCCESS = 0
    FAIL = -1
    NOT_SUPPORTED = -2
    INVALID_PARAM = -3
    CURRENTLY_ACTIVE = -4
    MODULE_NOT_FOUND = -5

    @classmethod
    def coerce(cls, value: int) -> "InitResult":
        try:
            return cls(int(value))
        except ValueError:
            return cls.FAIL


class VideoFormat(str, Enum):
    NV12 = "NV12"
    I420 = "I420"
    I444 = "I444"
    P010 = "P010"
    I010 = "I010"
    P216 = "P216"
    P416 = "P416"
    BGRA = "BGRA"


class ColorSpace(str, Enum):
    DEFAULT = "default"
    CS_601 = "601"
    CS_709 = "709"
    SRGB = "sRGB"
    CS_2100_PQ = "2100PQ"
    CS_2100_HLG = "2100HLG"


class ColorRange(str, Enum):
    PARTIAL = "partial"
    FULL = "full"


class SpeakerLayout(IntEnum):
    MONO = 1
    STEREO = 2


# FPSCommon labels -> (num, den)
COMMON_FPS = {
    "10": (10, 1),
    "20": (20, 1),
    "24 NTSC": (24000, 1001),
    "25 PAL": (25, 1),
    "25": (25, 1),
    "29.97": (30000, 1001),
    "30": (30, 1),
    "48": (48, 1),
    "50 PAL": (50, 1),
    "50": (50, 1),
    "59.94": (60000, 1001),
    "60": (60, 1),
}


@dataclass(frozen=True)
class VideoInfo:
    graphics_module: str
    fps_num: int
    fps_den: int
    base_width: int
    base_height: int
    output_width: int
    output_height: int
    output_format: VideoFormat
    colorspace: ColorSpace
    range: ColorRange
    adapter: int
    gpu_conversion: bool = True
    scale_type: ScaleType = ScaleType.BICUBIC


@dataclass(frozen=True)
class AudioInfo:
    samples_per_sec: int
    speakers: SpeakerLayout = SpeakerLayout.STEREO


class VideoPipeline(Protocol):
    def reset_video(self, info: VideoInfo) -> int: ...


class AudioPipeline(Protocol):
    def reset_audio(self, info: AudioInfo) -> bool: ...

    def monitoring_available(self) -> bool: ...

    def set_monitoring_device(self, name: str, device_id: str) -> bool: ...


class OutputState(Protocol):
    def active(self) -> bool: ...


class NoActiveOutputs:
    def active(self) -> bool:
        return False


def config_fps(store: ConfigStore) -> Tuple[int, int]:
    """FPS as (num, den) from FPSType: 0 common label, 1 integer, 2 fraction."""
    fps_type = store.get_uint(S.VIDEO, V.FPS_TYPE, 0)
    if fps_type == 1:
        return max(store.get_uint(S.VIDEO, V.FPS_INT, 30), 1), 1
    if fps_type == 2:
        return store.get_uint(S.VIDEO, V.FPS_NUM, 30), store.get_uint(S.VIDEO, V.FPS_DEN, 1)
    label = store.get_string(S.VIDEO, V.FPS_COMMON, "30").strip()
    return COMMON_FPS.get(label, (30, 1))


def _video_format(name: str) -> VideoFormat:
    try:
        return VideoFormat(name.strip().upper())
    except ValueError:
        log.warning("Unknown color format '%s', using NV12", name)
        return VideoFormat.NV12


def _color_space(name: str) -> ColorSpace:
    for cs in ColorSpace:
        if cs.value.lower() == name.strip().lower():
            return cs
    return ColorSpace.DEFAULT


def _color_range(name: str) -> ColorRange:
    return ColorRange.FULL if name.strip().lower() == "full" else ColorRange.PARTIAL


class VideoResetter:
    def __init__(self, pipeline: VideoPipeline, outputs: Optional[OutputState] = None,
                 bus: Optional[EventBus] = None, graphics_module: str = "opengl") -> None:
        self.pipeline = pipeline
        self.outputs = outputs or NoActiveOutputs()
        self.bus = bus
        self.graphics_module = graphics_module

    def build_info(self, store: ConfigStore) -> VideoInfo:
        fps_num, fps_den = config_fps(store)
        return VideoInfo(
            graphics_module=self.graphics_module,
            fps_num=fps_num,
            fps_den=fps_den,
            base_width=store.get_uint(S.VIDEO, V.BASE_CX),
            base_height=store.get_uint(S.VIDEO, V.BASE_CY),
            output_width=store.get_uint(S.VIDEO, V.OUTPUT_CX),
            output_height=store.get_uint(S.VIDEO, V.OUTPUT_CY),
            output_format=_video_format(store.get_string(S.VIDEO, V.COLOR_FORMAT, "NV12")),
            colorspace=_color_space(store.get_string(S.VIDEO, V.COLOR_SPACE, "709")),
            range=_color_range(store.get_string(S.VIDEO, V.COLOR_RANGE, "Partial")),
            adapter=store.get_uint(S.VIDEO, V.ADAPTER_IDX, 0),
        )

    def reset(self, store: ConfigStore) -> InitResult:
        """Reset the video pipeline. Never touches live state while an output is active."""
        if self.outputs.active():
            return InitResult.CURRENTLY_ACTIVE

        with span("VideoResetter.reset"):
            info = self.build_info(store)
            result = InitResult.coerce(self.pipeline.reset_video(info))

        if result == InitResult.SUCCESS:
            log.info(
                "Video reset: base=%dx%d output=%dx%d fps=%d/%d format=%s",
                info.base_width, info.base_height, info.output_width, info.output_height,
                info.fps_num, info.fps_den, info.output_format.value,
            )
            if self.bus is not None:
                self.bus.emit(CanvasResized(info.base_width, info.base_height))
                self.bus.emit(OutputResized(info.output_width, info.output_height))
        else:
            log.error("Video reset failed: %s", result.name)
        return result


class AudioResetter:
    def __init__(self, pipeline: AudioPipeline) -> None:
        self.pipeline = pipeline

    def reset(self, store: ConfigStore) -> bool:
        with span("AudioResetter.reset"):
            info = AudioInfo(samples_per_sec=store.get_uint(S.AUDIO, A.SAMPLE_RATE, 48000))
            ok = bool(self.pipeline.reset_audio(info))
        if ok:
            log.info("Audio reset: %d Hz, stereo", info.samples_per_sec)
        else:
            log.error("Audio reset failed (%d Hz)", info.samples_per_sec)
        return ok

    def apply_monitoring_device(self, store: ConfigStore) -> bool:
        if not self.pipeline.monitoring_available():
            return False
        name = store.get_string(S.AUDIO, A.MONITORING_DEVICE_NAME, "Default")
        device_id = store.get_string(S.AUDIO, A.MONITORING_DEVICE_ID, "default")
        ok = bool(self.pipeline.set_monitoring_device(name, device_id))
        log.info("Audio monitoring device:\n\tname: %s\n\tid: %s", name, device_id)
        return ok

# -*- coding: utf-8 -*-
"""Defaults installation for a profile's ``basic.ini``.

Every recognized key gets a default through one data-driven table
(``DEFAULTS``) consumed by a single loop. Defaults live in the store's defaults
layer, so a user value is never overwritten.

Values computed from the environment (canvas/output size, encoders, audio
codec) are resolved by the helpers below. Base and output resolutions are
additionally *pinned* as user values when absent, so later changes to this
computation never resize an existing user's canvas.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from core.keys import AudioKeys as A
from core.keys import OutputKeys as O
from core.keys import Sections as S
from core.keys import VideoKeys as V
from core.types import LegacyFlags, Size
from infra.probes import DisplayGeometry, DisplayProbe, EncoderProbe, log_encoders
from storage.config_store import ConfigStore, Value

log = logging.getLogger(__name__)

MAX_NEW_USER_BASE = Size(1920, 1080)
MAX_OUTPUT_PIXELS = 1280 * 720

# descending output scale factors; the first one under MAX_OUTPUT_PIXELS wins
SCALED_VALS: Tuple[float, ...] = (1.0, 1.25, 1.0 / 0.75, 1.5, 1.0 / 0.6, 1.75, 2.0, 2.25, 2.5, 2.75, 3.0)

SIMPLE_ENCODER_X264 = "x264"

# (encoder id probed, simple-output encoder name), in preference order
HARDWARE_ENCODERS: Tuple[Tuple[str, str], ...] = (
    ("ffmpeg_nvenc", "nvenc"),
    ("obs_qsv11", "qsv"),
    ("h264_texture_amf", "amd"),
    ("com.apple.videotoolbox.videoencoder.ave.avc", "apple_h264"),
)

FALLBACK_AAC = "ffmpeg_aac"

VOLUME_METER_DECAY_FAST = 23.53


class ValueType(str, Enum):
    STRING = "string"
    INT = "int"
    UINT = "uint"
    BOOL = "bool"
    DOUBLE = "double"

    def accepts(self, value: Value) -> bool:
        if self is ValueType.STRING:
            return isinstance(value, str)
        if self is ValueType.BOOL:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if self is ValueType.DOUBLE:
            return isinstance(value, (int, float))
        if self is ValueType.UINT:
            return isinstance(value, int) and value >= 0
        return isinstance(value, int)


@dataclass(frozen=True)
class DefaultsContext:
    platform: str
    video_path: str

    @property
    def container(self) -> str:
        return "hybrid_mov" if self.platform == "darwin" else "hybrid_mp4"


DefaultValue = Union[Value, Callable[[DefaultsContext], Value]]


@dataclass(frozen=True)
class DefaultEntry:
    section: str
    key: str
    type: ValueType
    value: DefaultValue

    def resolve(self, ctx: DefaultsContext) -> Value:
        """Concrete value for ``ctx``; TypeError when it does not fit ``type``."""
        value = self.value(ctx) if callable(self.value) else self.value
        if not self.type.accepts(value):
            raise TypeError(f"Default {self.section}/{self.key} must be {self.type.value}, got {value!r}")
        return value


def _e(section: str, key: str, vtype: ValueType, value: DefaultValue) -> DefaultEntry:
    return DefaultEntry(section, key, vtype, value)


_STR, _INT, _UINT, _BOOL, _DBL = (
    ValueType.STRING, ValueType.INT, ValueType.UINT, ValueType.BOOL, ValueType.DOUBLE,
)


def _video_path(ctx: DefaultsContext) -> str:
    return ctx.video_path


def _container(ctx: DefaultsContext) -> str:
    return ctx.container


DEFAULTS: List[DefaultEntry] = [
    _e(S.OUTPUT, O.MODE, _STR, "Simple"),

    _e(S.STREAM1, O.IGNORE_RECOMMENDED, _BOOL, False),
    _e(S.STREAM1, "EnableMultitrackVideo", _BOOL, False),
    _e(S.STREAM1, "MultitrackVideoMaximumAggregateBitrateAuto", _BOOL, True),
    _e(S.STREAM1, "MultitrackVideoMaximumVideoTracksAuto", _BOOL, True),

    _e(S.SIMPLE_OUTPUT, "FilePath", _STR, _video_path),
    _e(S.SIMPLE_OUTPUT, O.REC_FORMAT2, _STR, _container),
    _e(S.SIMPLE_OUTPUT, "VBitrate", _UINT, 6000),
    _e(S.SIMPLE_OUTPUT, "ABitrate", _UINT, 160),
    _e(S.SIMPLE_OUTPUT, "UseAdvanced", _BOOL, False),
    _e(S.SIMPLE_OUTPUT, "Preset", _STR, "veryfast"),
    _e(S.SIMPLE_OUTPUT, "NVENCPreset2", _STR, "p5"),
    _e(S.SIMPLE_OUTPUT, "RecQuality", _STR, "Stream"),
    _e(S.SIMPLE_OUTPUT, "RecRB", _BOOL, False),
    _e(S.SIMPLE_OUTPUT, "RecRBTime", _INT, 20),
    _e(S.SIMPLE_OUTPUT, "RecRBSize", _INT, 512),
    _e(S.SIMPLE_OUTPUT, "RecRBPrefix", _STR, "Replay"),
    _e(S.SIMPLE_OUTPUT, "StreamAudioEncoder", _STR, "aac"),
    _e(S.SIMPLE_OUTPUT, O.REC_AUDIO_ENCODER, _STR, "aac"),
    _e(S.SIMPLE_OUTPUT, O.REC_TRACKS, _UINT, 1 << 0),

    _e(S.ADV_OUT, "ApplyServiceSettings", _BOOL, True),
    _e(S.ADV_OUT, "UseRescale", _BOOL, False),
    _e(S.ADV_OUT, "TrackIndex", _UINT, 1),
    _e(S.ADV_OUT, "VodTrackIndex", _UINT, 2),
    _e(S.ADV_OUT, "Encoder", _STR, "obs_x264"),
    _e(S.ADV_OUT, "RecType", _STR, "Standard"),
    _e(S.ADV_OUT, "RecFilePath", _STR, _video_path),
    _e(S.ADV_OUT, O.REC_FORMAT2, _STR, _container),
    _e(S.ADV_OUT, "RecUseRescale", _BOOL, False),
    _e(S.ADV_OUT, O.REC_TRACKS, _UINT, 1 << 0),
    _e(S.ADV_OUT, O.REC_ENCODER, _STR, "none"),
    _e(S.ADV_OUT, "FLVTrack", _UINT, 1),
    _e(S.ADV_OUT, "StreamMultiTrackAudioMixes", _UINT, 1),
    _e(S.ADV_OUT, "FFOutputToFile", _BOOL, True),
    _e(S.ADV_OUT, "FFFilePath", _STR, _video_path),
    _e(S.ADV_OUT, "FFExtension", _STR, "mp4"),
    _e(S.ADV_OUT, "FFVBitrate", _UINT, 6000),
    _e(S.ADV_OUT, "FFVGOPSize", _UINT, 250),
    _e(S.ADV_OUT, "FFUseRescale", _BOOL, False),
    _e(S.ADV_OUT, "FFIgnoreCompat", _BOOL, False),
    _e(S.ADV_OUT, "FFABitrate", _UINT, 160),
    _e(S.ADV_OUT, O.FF_AUDIO_MIXES, _UINT, 1),
    *[_e(S.ADV_OUT, f"Track{i}Bitrate", _UINT, 160) for i in range(1, 7)],
    _e(S.ADV_OUT, "RecSplitFileTime", _UINT, 15),
    _e(S.ADV_OUT, "RecSplitFileSize", _UINT, 2048),
    _e(S.ADV_OUT, "RecRB", _BOOL, False),
    _e(S.ADV_OUT, "RecRBTime", _UINT, 20),
    _e(S.ADV_OUT, "RecRBSize", _INT, 512),

    _e(S.OUTPUT, "FilenameFormatting", _STR, "%CCYY-%MM-%DD %hh-%mm-%ss"),
    _e(S.OUTPUT, "DelayEnable", _BOOL, False),
    _e(S.OUTPUT, "DelaySec", _UINT, 20),
    _e(S.OUTPUT, "DelayPreserve", _BOOL, True),
    _e(S.OUTPUT, "Reconnect", _BOOL, True),
    _e(S.OUTPUT, O.RETRY_DELAY, _UINT, 2),
    _e(S.OUTPUT, "MaxRetries", _UINT, 25),
    _e(S.OUTPUT, "BindIP", _STR, "default"),
    _e(S.OUTPUT, "IPFamily", _STR, "IPv4+IPv6"),
    _e(S.OUTPUT, "NewSocketLoopEnable", _BOOL, False),
    _e(S.OUTPUT, "LowLatencyEnable", _BOOL, False),

    _e(S.VIDEO, V.FPS_TYPE, _UINT, 0),
    _e(S.VIDEO, V.FPS_COMMON, _STR, "30"),
    _e(S.VIDEO, V.FPS_INT, _UINT, 30),
    _e(S.VIDEO, V.FPS_NUM, _UINT, 30),
    _e(S.VIDEO, V.FPS_DEN, _UINT, 1),
    _e(S.VIDEO, V.SCALE_TYPE, _STR, "bicubic"),
    _e(S.VIDEO, V.COLOR_FORMAT, _STR, "NV12"),
    _e(S.VIDEO, V.COLOR_SPACE, _STR, "709"),
    _e(S.VIDEO, V.COLOR_RANGE, _STR, "Partial"),
    _e(S.VIDEO, V.ADAPTER_IDX, _UINT, 0),
    _e(S.VIDEO, "SdrWhiteLevel", _UINT, 300),
    _e(S.VIDEO, "HdrNominalPeakLevel", _UINT, 1000),

    _e(S.AUDIO, A.MONITORING_DEVICE_ID, _STR, "default"),
    _e(S.AUDIO, A.MONITORING_DEVICE_NAME, _STR, "Default"),
    _e(S.AUDIO, A.SAMPLE_RATE, _UINT, 48000),
    _e(S.AUDIO, A.CHANNEL_SETUP, _STR, "Stereo"),
    _e(S.AUDIO, "MeterDecayRate", _DBL, VOLUME_METER_DECAY_FAST),
    _e(S.AUDIO, "PeakMeterType", _UINT, 0),
]


def default_video_path() -> str:
    videos = Path.home() / "Videos"
    return str(videos if videos.is_dir() else Path.home())


# ---------------------------------------------------------------------------
# Computed defaults
# ---------------------------------------------------------------------------

def compute_base_resolution(geometry: DisplayGeometry, flags: LegacyFlags) -> Size:
    """Primary display size, capped to 1920x1080 for users without Pre19Defaults."""
    size = Size(geometry.pixel_width, geometry.pixel_height)
    if not flags.pre19_defaults and size.pixels > MAX_NEW_USER_BASE.pixels:
        return MAX_NEW_USER_BASE
    return size


def compute_output_resolution(base: Size, scales: Sequence[float] = SCALED_VALS) -> Size:
    """Largest downscale of ``base`` whose pixel count is <= 1280x720.

    If no factor qualifies, the last one tried is kept.
    """
    cx, cy = base.width, base.height
    for scale in scales:
        if cx * cy <= MAX_OUTPUT_PIXELS:
            break
        cx = int(base.width / scale)
        cy = int(base.height / scale)
    return Size(cx, cy)


def choose_simple_encoder(encoders: EncoderProbe, flags: LegacyFlags) -> str:
    if flags.pre23_defaults:
        return SIMPLE_ENCODER_X264
    for encoder_id, simple_name in HARDWARE_ENCODERS:
        if encoders.available(encoder_id):
            return simple_name
    return SIMPLE_ENCODER_X264


def aac_preference(platform: str) -> Tuple[str, ...]:
    if platform in ("darwin", "win32"):
        return ("CoreAudio_AAC", "libfdk_aac")
    return ("libfdk_aac",)


def choose_aac_encoder(encoders: EncoderProbe, platform: str) -> str:
    for encoder_id in aac_preference(platform):
        if encoders.available(encoder_id):
            return encoder_id
    return FALLBACK_AAC


def _pin(store: ConfigStore, section: str, key: str, value: int) -> bool:
    store.set_default(section, key, value)
    if store.has_user_value(section, key):
        return False
    store.set(section, key, value)
    return True


# ---------------------------------------------------------------------------
# Installer
# ---------------------------------------------------------------------------

def install_defaults(
    store: ConfigStore,
    display: DisplayProbe,
    encoders: EncoderProbe,
    flags: Optional[LegacyFlags] = None,
    *,
    platform: Optional[str] = None,
    video_path: Optional[str] = None,
) -> bool:
    """Install every default. Returns True when a resolution had to be pinned."""
    flags = flags or LegacyFlags()
    ctx = DefaultsContext(
        platform=platform or sys.platform,
        video_path=video_path if video_path is not None else default_video_path(),
    )

    for entry in DEFAULTS:
        store.set_default(entry.section, entry.key, entry.resolve(ctx))

    base = compute_base_resolution(display.primary_display(), flags)
    pinned = _pin(store, S.VIDEO, V.BASE_CX, base.width)
    pinned = _pin(store, S.VIDEO, V.BASE_CY, base.height) or pinned

    output = compute_output_resolution(base)
    pinned = _pin(store, S.VIDEO, V.OUTPUT_CX, output.width) or pinned
    pinned = _pin(store, S.VIDEO, V.OUTPUT_CY, output.height) or pinned

    simple = choose_simple_encoder(encoders, flags)
    store.set_default(S.SIMPLE_OUTPUT, O.STREAM_ENCODER, simple)
    store.set_default(S.SIMPLE_OUTPUT, O.REC_ENCODER, simple)

    aac = choose_aac_encoder(encoders, ctx.platform)
    store.set_default(S.ADV_OUT, O.AUDIO_ENCODER, aac)
    store.set_default(S.ADV_OUT, O.REC_AUDIO_ENCODER, aac)

    log.info(
        "Defaults installed: base=%dx%d output=%dx%d encoder=%s aac=%s",
        base.width, base.height, output.width, output.height, simple, aac,
    )
    log_encoders(encoders)
    return pinned

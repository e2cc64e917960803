# -*- coding: utf-8 -*-
from __future__ import annotations

from app.events import CanvasResized, EventBus, EventRecorder, OutputResized
from core.keys import AudioKeys as A
from core.keys import Sections as S
from core.keys import VideoKeys as V
from core.types import ScaleType
from services.pipelines import HeadlessAudioPipeline, HeadlessVideoPipeline
from services.subsystems import (
    AudioResetter,
    ColorRange,
    ColorSpace,
    InitResult,
    VideoFormat,
    VideoResetter,
    config_fps,
)
from storage.config_store import ConfigStore


class _ActiveOutputs:
    def active(self) -> bool:
        return True


class _RecordingPipeline:
    def __init__(self, result: int = 0) -> None:
        self.result = result
        self.calls = []

    def reset_video(self, info) -> int:
        self.calls.append(info)
        return self.result


def _video_store() -> ConfigStore:
    store = ConfigStore()
    store.loads(
        "[Video]\nBaseCX=1920\nBaseCY=1080\nOutputCX=1280\nOutputCY=720\n"
        "FPSType=0\nFPSCommon=60\nColorFormat=I444\nColorSpace=sRGB\nColorRange=Full\nAdapterIdx=1\n"
    )
    return store


def test_active_output_blocks_reset_without_side_effects() -> None:
    store = _video_store()
    before = store.snapshot()
    pipeline = _RecordingPipeline()
    bus = EventBus()
    recorder = EventRecorder(bus)

    result = VideoResetter(pipeline, _ActiveOutputs(), bus).reset(store)

    assert result == InitResult.CURRENTLY_ACTIVE
    assert pipeline.calls == []
    assert store.snapshot() == before
    assert recorder.events == []


def test_successful_reset_builds_info_and_emits_resize_events() -> None:
    pipeline = HeadlessVideoPipeline()
    bus = EventBus()
    recorder = EventRecorder(bus)

    result = VideoResetter(pipeline, bus=bus).reset(_video_store())

    assert result == InitResult.SUCCESS
    info = pipeline.current
    assert (info.fps_num, info.fps_den) == (60, 1)
    assert info.output_format == VideoFormat.I444
    assert info.colorspace == ColorSpace.SRGB
    assert info.range == ColorRange.FULL
    assert info.adapter == 1
    assert info.gpu_conversion is True
    assert info.scale_type == ScaleType.BICUBIC
    assert recorder.events == [CanvasResized(1920, 1080), OutputResized(1280, 720)]


def test_failure_codes_are_returned_verbatim() -> None:
    store = _video_store()
    assert VideoResetter(_RecordingPipeline(-3)).reset(store) == InitResult.INVALID_PARAM
    assert VideoResetter(_RecordingPipeline(-2)).reset(store) == InitResult.NOT_SUPPORTED
    # unknown codes collapse to a generic failure
    assert VideoResetter(_RecordingPipeline(42)).reset(store) == InitResult.FAIL


def test_failed_reset_emits_nothing() -> None:
    bus = EventBus()
    recorder = EventRecorder(bus)
    resetter = VideoResetter(HeadlessVideoPipeline(), bus=bus, graphics_module="vulkan")
    assert resetter.reset(_video_store()) == InitResult.MODULE_NOT_FOUND
    assert recorder.events == []


def test_fps_modes() -> None:
    store = ConfigStore()
    store.set(S.VIDEO, V.FPS_COMMON, "29.97")
    assert config_fps(store) == (30000, 1001)
    store.set(S.VIDEO, V.FPS_COMMON, "bogus")
    assert config_fps(store) == (30, 1)

    store.set(S.VIDEO, V.FPS_TYPE, 1)
    store.set(S.VIDEO, V.FPS_INT, 144)
    assert config_fps(store) == (144, 1)

    store.set(S.VIDEO, V.FPS_TYPE, 2)
    store.set(S.VIDEO, V.FPS_NUM, 24000)
    store.set(S.VIDEO, V.FPS_DEN, 1001)
    assert config_fps(store) == (24000, 1001)


def test_audio_reset_and_monitoring_device() -> None:
    pipeline = HeadlessAudioPipeline()
    resetter = AudioResetter(pipeline)
    store = ConfigStore()
    store.set(S.AUDIO, A.SAMPLE_RATE, 44100)
    store.set(S.AUDIO, A.MONITORING_DEVICE_NAME, "Headphones")
    store.set(S.AUDIO, A.MONITORING_DEVICE_ID, "hw:1")

    assert resetter.reset(store) is True
    assert pipeline.current.samples_per_sec == 44100
    assert resetter.apply_monitoring_device(store) is True
    assert pipeline.monitoring_device == ("Headphones", "hw:1")


def test_audio_reset_rejects_unsupported_rate() -> None:
    store = ConfigStore()
    store.set(S.AUDIO, A.SAMPLE_RATE, 22050)
    assert AudioResetter(HeadlessAudioPipeline()).reset(store) is False

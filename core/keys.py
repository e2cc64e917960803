# -*- coding: utf-8 -*-
"""Single source of truth for configuration section/key names.

Why:
- Avoid typos scattered across stages and resetters.
- Make schema evolution (migrations) safer.

These are *storage keys* in the persisted INI files (``basic.ini`` per profile
and the global ``user.ini``). Keep them stable and migrate when needed.
"""

from __future__ import annotations


class Sections:
    GENERAL = "General"
    BASIC = "Basic"
    OUTPUT = "Output"
    SIMPLE_OUTPUT = "SimpleOutput"
    ADV_OUT = "AdvOut"
    STREAM1 = "Stream1"
    TWITCH = "Twitch"
    VIDEO = "Video"
    AUDIO = "Audio"


class GeneralKeys:
    NAME = "Name"
    LAST_VERSION = "LastVersion"
    FIRST_RUN = "FirstRun"

    PRE19_DEFAULTS = "Pre19Defaults"
    PRE21_DEFAULTS = "Pre21Defaults"
    PRE23_DEFAULTS = "Pre23Defaults"
    PRE24_1_DEFAULTS = "Pre24.1Defaults"


class BasicKeys:
    PROFILE = "Profile"
    PROFILE_DIR = "ProfileDir"
    SCENE_COLLECTION = "SceneCollection"
    SCENE_COLLECTION_FILE = "SceneCollectionFile"


class OutputKeys:
    MODE = "Mode"
    RETRY_DELAY = "RetryDelay"

    # legacy/new container tokens (both simple and advanced output)
    REC_FORMAT = "RecFormat"
    REC_FORMAT2 = "RecFormat2"

    ENFORCE_BITRATE = "EnforceBitrate"
    IGNORE_RECOMMENDED = "IgnoreRecommended"
    MOVED_OLD_ENFORCE = "MovedOldEnforce"

    STREAM_ENCODER = "StreamEncoder"
    REC_ENCODER = "RecEncoder"
    AUDIO_ENCODER = "AudioEncoder"
    REC_AUDIO_ENCODER = "RecAudioEncoder"

    FF_AUDIO_TRACK = "FFAudioTrack"
    FF_AUDIO_MIXES = "FFAudioMixes"
    PRE22_1_SETTINGS = "Pre22.1Settings"
    REC_TRACK_INDEX = "RecTrackIndex"
    REC_TRACKS = "RecTracks"

    RESCALE = "Rescale"
    RESCALE_FILTER = "RescaleFilter"
    REC_RESCALE = "RecRescale"
    REC_RESCALE_FILTER = "RecRescaleFilter"

    ADDON_CHOICE = "AddonChoice"


class VideoKeys:
    BASE_CX = "BaseCX"
    BASE_CY = "BaseCY"
    OUTPUT_CX = "OutputCX"
    OUTPUT_CY = "OutputCY"
    FPS_TYPE = "FPSType"
    FPS_COMMON = "FPSCommon"
    FPS_INT = "FPSInt"
    FPS_NUM = "FPSNum"
    FPS_DEN = "FPSDen"
    SCALE_TYPE = "ScaleType"
    COLOR_FORMAT = "ColorFormat"
    COLOR_SPACE = "ColorSpace"
    COLOR_RANGE = "ColorRange"
    ADAPTER_IDX = "AdapterIdx"
    RENDERER = "Renderer"


class AudioKeys:
    SAMPLE_RATE = "SampleRate"
    CHANNEL_SETUP = "ChannelSetup"
    MONITORING_DEVICE_ID = "MonitoringDeviceId"
    MONITORING_DEVICE_NAME = "MonitoringDeviceName"

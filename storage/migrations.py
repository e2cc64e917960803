# -*- coding: utf-8 -*-
"""storage/migrations.py

Profile configuration migrations (``basic.ini``) between releases.

Rules:
- PURE: they only use the in-memory ConfigStore API (no IO). The caller
  persists with ``save_safe`` when ``migrate`` reports a change.
- Idempotent: applying a rule a second time must not change anything.
- Declared order matters; later rules may observe earlier ones.
- A malformed legacy value means "nothing to migrate": the rule is skipped,
  never raises, and the defaults installer fills the gap afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from core.keys import OutputKeys as K
from core.keys import Sections as S
from core.types import LegacyFlags, ScaleType
from storage.config_store import ConfigStore, parse_bool, parse_int

log = logging.getLogger(__name__)

MAX_AUDIO_MIXES = 6

# legacy container tokens -> canonical format identifiers
FORMAT_ALIASES = {
    "ts": "mpegts",
    "m3u8": "hls",
    "fmp4": "fragmented_mp4",
    "fmov": "fragmented_mov",
}

RuleFn = Callable[[ConfigStore, Optional[LegacyFlags]], bool]


@dataclass(frozen=True)
class MigrationRule:
    name: str
    apply: RuleFn


def _track_mask(raw: Optional[str]) -> Optional[int]:
    track = parse_int(raw)
    if track is None or not 1 <= track <= MAX_AUDIO_MIXES:
        return None
    return 1 << (track - 1)


def migrate_ffmpeg_audio_track(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    """AdvOut/FFAudioTrack (single track) -> AdvOut/FFAudioMixes (bitmask)."""
    if not store.has_user_value(S.ADV_OUT, K.FF_AUDIO_TRACK):
        return False
    if store.has_user_value(S.ADV_OUT, K.PRE22_1_SETTINGS):
        return False
    mask = _track_mask(store.get_user_raw(S.ADV_OUT, K.FF_AUDIO_TRACK))
    if mask is None:
        return False
    store.set(S.ADV_OUT, K.FF_AUDIO_MIXES, mask)
    store.set(S.ADV_OUT, K.PRE22_1_SETTINGS, True)
    return True


def migrate_rec_track_index(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    """AdvOut/RecTrackIndex -> AdvOut/RecTracks bitmask; the legacy key goes away."""
    if not store.has_user_value(S.ADV_OUT, K.REC_TRACK_INDEX):
        return False
    if store.has_user_value(S.ADV_OUT, K.REC_TRACKS):
        return False
    mask = _track_mask(store.get_user_raw(S.ADV_OUT, K.REC_TRACK_INDEX))
    if mask is None:
        return False
    store.set(S.ADV_OUT, K.REC_TRACKS, mask)
    store.remove(S.ADV_OUT, K.REC_TRACK_INDEX)
    return True


def migrate_twitch_addon_choice(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    # chat extensions default to "both" for installs older than 24.1
    if flags is None or not flags.pre24_1_defaults:
        return False
    if store.has_user_value(S.TWITCH, K.ADDON_CHOICE):
        return False
    store.set(S.TWITCH, K.ADDON_CHOICE, 3)
    return True


def migrate_enforce_bitrate(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    """SimpleOutput/EnforceBitrate -> Stream1/IgnoreRecommended (inverted)."""
    if not store.has_user_value(S.SIMPLE_OUTPUT, K.ENFORCE_BITRATE):
        return False
    if store.has_user_value(S.STREAM1, K.IGNORE_RECOMMENDED):
        return False
    if store.has_user_value(S.STREAM1, K.MOVED_OLD_ENFORCE):
        return False
    enforce = parse_bool(store.get_user_raw(S.SIMPLE_OUTPUT, K.ENFORCE_BITRATE))
    if enforce is None:
        return False
    store.set(S.STREAM1, K.IGNORE_RECOMMENDED, not enforce)
    store.set(S.STREAM1, K.MOVED_OLD_ENFORCE, True)
    return True


def clamp_retry_delay(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    """Output/RetryDelay has a floor of 1 second."""
    if not store.has_user_value(S.OUTPUT, K.RETRY_DELAY):
        return False
    delay = parse_int(store.get_user_raw(S.OUTPUT, K.RETRY_DELAY))
    if delay is None or delay >= 1:
        return False
    store.set(S.OUTPUT, K.RETRY_DELAY, 1)
    return True


def _migrate_format(store: ConfigStore, section: str) -> bool:
    has_old = store.has_user_value(section, K.REC_FORMAT)
    has_new = store.has_user_value(section, K.REC_FORMAT2)
    if not has_old and not has_new:
        return False
    old_format = (store.get_user_raw(section, K.REC_FORMAT2 if has_new else K.REC_FORMAT) or "").strip()
    if not old_format:
        return False
    new_format = FORMAT_ALIASES.get(old_format, old_format)
    if new_format == old_format and has_new:
        return False
    store.set(section, K.REC_FORMAT2, new_format)
    return True


def migrate_adv_rec_format(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    return _migrate_format(store, S.ADV_OUT)


def migrate_simple_rec_format(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    return _migrate_format(store, S.SIMPLE_OUTPUT)


def _promote_rescale(store: ConfigStore, flag_key: str, filter_key: str) -> bool:
    if parse_bool(store.get_user_raw(S.ADV_OUT, flag_key)) is not True:
        return False
    if store.has_user_value(S.ADV_OUT, filter_key):
        return False
    store.set(S.ADV_OUT, filter_key, int(ScaleType.BILINEAR))
    return True


def migrate_stream_rescale(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    return _promote_rescale(store, K.RESCALE, K.RESCALE_FILTER)


def migrate_rec_rescale(store: ConfigStore, flags: Optional[LegacyFlags] = None) -> bool:
    return _promote_rescale(store, K.REC_RESCALE, K.REC_RESCALE_FILTER)


RULES: List[MigrationRule] = [
    MigrationRule("ffmpeg_audio_track_to_mixes", migrate_ffmpeg_audio_track),
    MigrationRule("rec_track_index_to_tracks", migrate_rec_track_index),
    MigrationRule("twitch_addon_choice", migrate_twitch_addon_choice),
    MigrationRule("enforce_bitrate_to_ignore_recommended", migrate_enforce_bitrate),
    MigrationRule("retry_delay_floor", clamp_retry_delay),
    MigrationRule("adv_rec_format_tokens", migrate_adv_rec_format),
    MigrationRule("simple_rec_format_tokens", migrate_simple_rec_format),
    MigrationRule("stream_rescale_filter", migrate_stream_rescale),
    MigrationRule("rec_rescale_filter", migrate_rec_rescale),
]


def migrate(store: ConfigStore, flags: Optional[LegacyFlags] = None,
            rules: Optional[List[MigrationRule]] = None) -> bool:
    """Apply every rule in order. Returns True if any rule fired."""
    changed = False
    for rule in RULES if rules is None else rules:
        if rule.apply(store, flags):
            log.info("Config migration applied: %s", rule.name)
            changed = True
    return changed

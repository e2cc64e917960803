# -*- coding: utf-8 -*-
from __future__ import annotations

from core.keys import GeneralKeys as G
from core.keys import Sections as S
from core.types import LegacyFlags
from infra.migrations import migrate_user_config, parse_version
from storage.config_store import ConfigStore

CURRENT = "31.0.0"


def _user_config(last_version: str = "") -> ConfigStore:
    cfg = ConfigStore()
    if last_version:
        cfg.set(S.GENERAL, G.LAST_VERSION, last_version)
    return cfg


def test_parse_version() -> None:
    assert parse_version("27.1.3") == (27, 1, 3)
    assert parse_version("30.2.0-beta2") == (30, 2, 0)
    assert parse_version("30") == (30, 0, 0)
    assert parse_version("x.1") is None
    assert parse_version("") is None


def test_fresh_install_gets_no_legacy_flags() -> None:
    cfg = _user_config()
    assert migrate_user_config(cfg, CURRENT) is True
    assert LegacyFlags.from_user_config(cfg) == LegacyFlags()
    assert cfg.get_string(S.GENERAL, G.LAST_VERSION) == CURRENT


def test_upgrade_from_very_old_release_sets_every_flag() -> None:
    cfg = _user_config("18.0.2")
    migrate_user_config(cfg, CURRENT)
    assert LegacyFlags.from_user_config(cfg) == LegacyFlags(True, True, True, True)


def test_upgrade_sets_only_flags_older_than_previous_version() -> None:
    cfg = _user_config("23.2.1")
    migrate_user_config(cfg, CURRENT)
    flags = LegacyFlags.from_user_config(cfg)
    assert flags.pre24_1_defaults is True
    assert flags.pre23_defaults is False
    assert flags.pre19_defaults is False


def test_same_version_is_a_no_op() -> None:
    cfg = _user_config(CURRENT)
    assert migrate_user_config(cfg, CURRENT) is False


def test_explicit_user_choice_is_kept() -> None:
    cfg = _user_config("18.0.0")
    cfg.set(S.GENERAL, G.PRE19_DEFAULTS, False)
    migrate_user_config(cfg, CURRENT)
    assert cfg.get_bool(S.GENERAL, G.PRE19_DEFAULTS) is False
    assert cfg.get_bool(S.GENERAL, G.PRE21_DEFAULTS) is True


def test_unparseable_previous_version_counts_as_fresh() -> None:
    cfg = _user_config("nightly")
    assert migrate_user_config(cfg, CURRENT) is True
    assert LegacyFlags.from_user_config(cfg) == LegacyFlags()
    assert cfg.get_string(S.GENERAL, G.LAST_VERSION) == CURRENT

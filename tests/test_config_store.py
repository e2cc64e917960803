# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from storage.config_store import ConfigStore, ConfigStoreError


def test_user_value_wins_over_default_and_only_user_layer_is_saved(tmp_path) -> None:
    store = ConfigStore(tmp_path / "basic.ini")
    store.set_default("Video", "BaseCX", 1920)
    assert store.get_int("Video", "BaseCX") == 1920
    assert store.has_user_value("Video", "BaseCX") is False

    store.set("Video", "BaseCX", 2560)
    assert store.get_int("Video", "BaseCX") == 2560

    store.set("Output", "Reconnect", True)
    store.set_default("Output", "MaxRetries", 25)
    store.save_safe()

    reopened = ConfigStore.open(tmp_path / "basic.ini")
    assert reopened.get_user_raw("Video", "BaseCX") == "2560"
    assert reopened.get_bool("Output", "Reconnect") is True
    assert reopened.has_user_value("Output", "MaxRetries") is False


def test_keys_keep_their_case(tmp_path) -> None:
    path = tmp_path / "basic.ini"
    path.write_text("[AdvOut]\nFFAudioMixes=3\nPre22.1Settings=true\n", encoding="utf-8")
    store = ConfigStore.open(path)
    assert store.get_uint("AdvOut", "FFAudioMixes") == 3
    assert "FFAudioMixes=3" in store.dumps()


def test_malformed_values_use_the_fallback() -> None:
    store = ConfigStore()
    store.loads("[Video]\nBaseCX=wide\nBaseCY=-5\nFlag=maybe\nRatio=x\n")
    assert store.get_int("Video", "BaseCX", 7) == 7
    assert store.get_int("Video", "BaseCY") == -5
    assert store.get_uint("Video", "BaseCY", 3) == 3
    assert store.get_bool("Video", "Flag", True) is True
    assert store.get_double("Video", "Ratio", 1.5) == 1.5
    assert store.get_string("Video", "Missing", "none") == "none"


def test_missing_file_gives_empty_store_unless_required(tmp_path) -> None:
    store = ConfigStore.open(tmp_path / "absent.ini")
    assert store.snapshot() == {}
    with pytest.raises(ConfigStoreError):
        ConfigStore.open(tmp_path / "absent.ini", create=False)


def test_undecodable_file_raises(tmp_path) -> None:
    path = tmp_path / "user.ini"
    path.write_bytes(b"[General]\nName=\xff\xfe\n")
    with pytest.raises(ConfigStoreError):
        ConfigStore.open(path)


def test_save_safe_keeps_backup_and_leaves_no_temp_file(tmp_path) -> None:
    path = tmp_path / "user.ini"
    first = ConfigStore(path)
    first.set("Basic", "Profile", "Old")
    first.save_safe("tmp")

    second = ConfigStore.open(path)
    second.set("Basic", "Profile", "New")
    second.save_safe("tmp", "bak")

    assert ConfigStore.open(path).get_string("Basic", "Profile") == "New"
    assert ConfigStore.open(tmp_path / "user.ini.bak").get_string("Basic", "Profile") == "Old"
    assert not (tmp_path / "user.ini.tmp").exists()


def test_save_without_path_is_an_error() -> None:
    with pytest.raises(ConfigStoreError):
        ConfigStore().save_safe()


def test_remove_drops_empty_section() -> None:
    store = ConfigStore()
    store.set("AdvOut", "RecTrackIndex", 2)
    assert store.remove("AdvOut", "RecTrackIndex") is True
    assert store.remove("AdvOut", "RecTrackIndex") is False
    assert "AdvOut" not in store.snapshot()


def test_stray_lines_are_skipped(tmp_path) -> None:
    path = tmp_path / "basic.ini"
    path.write_text(
        "orphan=before any section\n"
        "[General]\n"
        "Name=My: Show\n"
        "this line has no delimiter\n"
        "=no key\n"
        "  ; comment\n"
        "[Video]\n"
        "  BaseCX = 1920\n",
        encoding="utf-8",
    )
    store = ConfigStore.open(path)
    assert store.snapshot() == {"General": {"Name": "My: Show"}, "Video": {"BaseCX": "1920"}}


def test_failed_replace_leaves_no_temp_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "user.ini"
    store = ConfigStore(path)
    store.set("Basic", "Profile", "Gaming")

    def _refuse(src, dst):
        raise PermissionError("target locked")

    monkeypatch.setattr("storage.config_store.os.replace", _refuse)
    with pytest.raises(ConfigStoreError):
        store.save_safe("tmp", "bak")
    assert not (tmp_path / "user.ini.tmp").exists()
    assert not path.exists()

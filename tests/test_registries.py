# -*- coding: utf-8 -*-
"""Profile / scene collection resolution and activation notifications."""
from __future__ import annotations

import json

import pytest

from app.events import (
    Changed,
    EntityKind,
    EventBus,
    EventRecorder,
    ListChanged,
    PreviewSceneChanged,
    SceneChanged,
)
from app.session import SessionState
from core.keys import BasicKeys as B
from core.keys import Sections as S
from services.errors import ConfigLoadError, FailureCause, StorageError
from services.profiles import PROFILE_CONFIG, ProfileRegistry
from services.scene_collections import SceneCollectionRegistry
from storage.config_store import ConfigStore
from storage.scene_collection_io import write_json_atomic


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def session(tmp_path) -> SessionState:
    return SessionState(user_config=ConfigStore(tmp_path / "user.ini"))


def test_requested_profile_wins_when_it_exists(tmp_path, bus) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles", bus)
    profiles.create("Gaming")
    profiles.create("Podcast")

    res = profiles.resolve("Podcast", "Gaming")
    assert (res.entity.name, res.created, res.source) == ("Podcast", False, "requested")


def test_missing_request_falls_back_to_persisted(tmp_path, bus) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles", bus)
    profiles.create("Gaming")

    res = profiles.resolve("Nope", "Gaming")
    assert (res.entity.name, res.created, res.source) == ("Gaming", False, "persisted")


def test_profile_is_created_under_persisted_name(tmp_path, bus) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles", bus)

    res = profiles.resolve("", "Stream: Main")
    assert res.created is True
    assert res.entity.directory.name == "Stream_ Main"
    assert res.entity.config_path.is_file()
    assert set(profiles.list()) == {"Stream: Main"}

    assert profiles.resolve("", "").entity.name == "Untitled"


def test_duplicate_names_get_unique_directories(tmp_path) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles")
    first = profiles.create("Show")
    second = profiles.create("Show")
    assert first.directory.name == "Show"
    assert second.directory.name == "Show 2"


def test_activating_existing_profile_notifies_in_order(tmp_path, bus, session) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles", bus)
    profiles.create("Gaming")
    recorder = EventRecorder(bus)

    session = profiles.activate(profiles.resolve("Gaming", ""), session)

    assert recorder.events == [
        ListChanged(EntityKind.PROFILE),
        Changed(EntityKind.PROFILE, "Gaming"),
        SceneChanged(EntityKind.PROFILE),
        PreviewSceneChanged(EntityKind.PROFILE),
    ]
    assert session.profile.name == "Gaming"
    assert session.profile_created is False
    saved = ConfigStore.open(tmp_path / "user.ini")
    assert saved.get_string(S.BASIC, B.PROFILE) == "Gaming"
    assert saved.get_string(S.BASIC, B.PROFILE_DIR) == "Gaming"


def test_freshly_created_profile_is_silent(tmp_path, bus, session) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles", bus)
    recorder = EventRecorder(bus)

    session = profiles.activate(profiles.resolve("", "New"), session)

    assert recorder.events == []
    assert session.profile_created is True
    assert session.config is not None


def test_notify_on_create_flag_publishes_for_new_entities(tmp_path, bus, session) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles", bus, notify_on_create=True)
    recorder = EventRecorder(bus)

    profiles.activate(profiles.resolve("", "New"), session)

    assert recorder.of_type(Changed) == [Changed(EntityKind.PROFILE, "New")]


def test_unusable_profile_storage_is_a_storage_error(tmp_path) -> None:
    not_a_dir = tmp_path / "profiles"
    not_a_dir.write_text("", encoding="utf-8")

    with pytest.raises(StorageError) as err:
        ProfileRegistry(not_a_dir).resolve("", "Untitled")
    assert err.value.cause == FailureCause.PROFILE_STORAGE


def test_profile_list_ignores_directories_without_config(tmp_path) -> None:
    root = tmp_path / "profiles"
    (root / "stray").mkdir(parents=True)
    (root / "named").mkdir()
    (root / "named" / PROFILE_CONFIG).write_text("[General]\nName=Display Name\n", encoding="utf-8")

    assert list(ProfileRegistry(root).list()) == ["Display Name"]


def test_new_scene_collection_has_one_default_scene(tmp_path) -> None:
    collections = SceneCollectionRegistry(tmp_path / "scenes")
    collection = collections.create("Live Show")
    doc = collections.load(collection)
    assert doc["name"] == "Live Show"
    assert doc["current_scene"] == "Scene"
    assert [s["name"] for s in doc["scene_order"]] == ["Scene"]


def test_activating_existing_collection_publishes_program_and_preview(tmp_path, bus, session) -> None:
    scenes = tmp_path / "scenes"
    scenes.mkdir()
    (scenes / "show.json").write_text(json.dumps({
        "name": "Show",
        "current_scene": "Preview",
        "current_program_scene": "Live",
        "scene_order": [{"name": "Live"}, {"name": "Preview"}],
    }), encoding="utf-8")
    collections = SceneCollectionRegistry(scenes, bus)
    recorder = EventRecorder(bus)

    session = collections.activate(collections.resolve("", "Show"), session)

    assert recorder.events == [
        ListChanged(EntityKind.SCENE_COLLECTION),
        Changed(EntityKind.SCENE_COLLECTION, "Show"),
        SceneChanged(EntityKind.SCENE_COLLECTION, "Live"),
        PreviewSceneChanged(EntityKind.SCENE_COLLECTION, "Preview"),
    ]
    assert session.document["current_program_scene"] == "Live"
    saved = ConfigStore.open(tmp_path / "user.ini")
    assert saved.get_string(S.BASIC, B.SCENE_COLLECTION) == "Show"
    assert saved.get_string(S.BASIC, B.SCENE_COLLECTION_FILE) == "show"


def test_corrupt_collection_uses_backup(tmp_path) -> None:
    scenes = tmp_path / "scenes"
    scenes.mkdir()
    (scenes / "Show.json").write_text("{ not json", encoding="utf-8")
    (scenes / "Show.json.bak").write_text(json.dumps({"name": "Show", "current_scene": "A"}), encoding="utf-8")
    collections = SceneCollectionRegistry(scenes)

    # unreadable document is listed under its file name
    collection = collections.list()["Show"]
    assert collections.load(collection)["current_scene"] == "A"


def test_corrupt_collection_without_backup_is_a_storage_error(tmp_path) -> None:
    scenes = tmp_path / "scenes"
    scenes.mkdir()
    (scenes / "Show.json").write_text("[]", encoding="utf-8")
    collections = SceneCollectionRegistry(scenes)

    with pytest.raises(StorageError) as err:
        collections.load(collections.list()["Show"])
    assert err.value.cause == FailureCause.SCENE_COLLECTION_STORAGE


def test_profile_with_stray_config_line_keeps_its_display_name(tmp_path) -> None:
    root = tmp_path / "profiles"
    (root / "My_ Show").mkdir(parents=True)
    (root / "My_ Show" / PROFILE_CONFIG).write_text(
        "[General]\nName=My: Show\nleft over by a text editor\n", encoding="utf-8"
    )
    profiles = ProfileRegistry(root)

    res = profiles.resolve("", "My: Show", "My_ Show")
    assert (res.entity.directory.name, res.created, res.source) == ("My_ Show", False, "persisted")
    assert sorted(p.name for p in root.iterdir()) == ["My_ Show"]


def test_unreadable_profile_is_found_by_directory_and_fails_to_load(tmp_path) -> None:
    root = tmp_path / "profiles"
    (root / "My_ Show").mkdir(parents=True)
    (root / "My_ Show" / PROFILE_CONFIG).write_bytes(b"[General]\nName=My: Show\xff\n")
    profiles = ProfileRegistry(root)

    res = profiles.resolve("", "My: Show", "My_ Show")
    assert (res.entity.name, res.created) == ("My: Show", False)
    assert res.entity.directory == root / "My_ Show"
    with pytest.raises(ConfigLoadError):
        profiles.load(res.entity)
    assert sorted(p.name for p in root.iterdir()) == ["My_ Show"]


def test_persisted_directory_outside_profiles_is_ignored(tmp_path) -> None:
    profiles = ProfileRegistry(tmp_path / "profiles")
    res = profiles.resolve("", "Show", "..")
    assert res.created is True
    assert res.entity.directory.parent == tmp_path / "profiles"


def test_collection_is_found_by_persisted_file_name(tmp_path) -> None:
    scenes = tmp_path / "scenes"
    scenes.mkdir()
    (scenes / "Live_ Set.json").write_text("{ not json", encoding="utf-8")
    collections = SceneCollectionRegistry(scenes)

    res = collections.resolve("", "Live: Set", "Live_ Set")
    assert (res.entity.path, res.created) == (scenes / "Live_ Set.json", False)
    with pytest.raises(StorageError):
        collections.load(res.entity)


def test_failed_document_write_leaves_no_temp_file(tmp_path, monkeypatch) -> None:
    target = tmp_path / "scenes" / "Show.json"

    def _refuse(src, dst):
        raise PermissionError("target locked")

    monkeypatch.setattr("storage.scene_collection_io.os.replace", _refuse)
    with pytest.raises(OSError):
        write_json_atomic(target, {"name": "Show"})
    assert list(target.parent.iterdir()) == []

# -*- coding: utf-8 -*-
from __future__ import annotations

import json

import pytest

from services.errors import FailureCause, ServiceInitError
from services.service_settings import DEFAULT_SERVICE_TYPE, SERVICE_FILE, init_service


def test_missing_service_file_creates_default(tmp_path) -> None:
    service = init_service(tmp_path)
    assert service.type == DEFAULT_SERVICE_TYPE
    data = json.loads((tmp_path / SERVICE_FILE).read_text(encoding="utf-8"))
    assert data == {"type": DEFAULT_SERVICE_TYPE, "settings": {}}


def test_existing_service_is_loaded(tmp_path) -> None:
    (tmp_path / SERVICE_FILE).write_text(
        json.dumps({"type": "rtmp_custom", "settings": {"server": "rtmp://example/live"}}), encoding="utf-8"
    )
    service = init_service(tmp_path)
    assert service.type == "rtmp_custom"
    assert service.settings["server"] == "rtmp://example/live"


def test_unusable_service_file_falls_back_to_default(tmp_path) -> None:
    (tmp_path / SERVICE_FILE).write_text("{broken", encoding="utf-8")
    assert init_service(tmp_path).type == DEFAULT_SERVICE_TYPE
    assert (tmp_path / f"{SERVICE_FILE}.bak").read_text(encoding="utf-8") == "{broken"


def test_unwritable_profile_directory_is_fatal(tmp_path) -> None:
    not_a_dir = tmp_path / "profile"
    not_a_dir.write_text("", encoding="utf-8")
    with pytest.raises(ServiceInitError) as err:
        init_service(not_a_dir)
    assert err.value.cause == FailureCause.SERVICE_INIT

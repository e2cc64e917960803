# -*- coding: utf-8 -*-
from __future__ import annotations

from infra import perf


def test_spans_are_recorded_only_when_enabled(monkeypatch) -> None:
    perf.clear()
    monkeypatch.delenv("STUDIO_PERF", raising=False)
    with perf.span("off"):
        pass
    assert perf.recorded() == []

    monkeypatch.setenv("STUDIO_PERF", "1")
    with perf.span("bootstrap.audio_ready"):
        pass
    assert [label for label, _ms in perf.recorded()] == ["bootstrap.audio_ready"]
    perf.clear()

# -*- coding: utf-8 -*-
"""Lifecycle event bus for bootstrap collaborators (no UI dependency).

Subscribers register per event type; events are delivered synchronously in
publish order, so list-changed always reaches a subscriber before changed,
scene-changed and preview-scene-changed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import time
from typing import Any, Callable, Dict, List, Type


class EntityKind(str, Enum):
    PROFILE = "profile"
    SCENE_COLLECTION = "scene_collection"


@dataclass(frozen=True)
class ListChanged:
    kind: EntityKind


@dataclass(frozen=True)
class Changed:
    kind: EntityKind
    name: str


@dataclass(frozen=True)
class SceneChanged:
    kind: EntityKind
    scene: str = ""


@dataclass(frozen=True)
class PreviewSceneChanged:
    kind: EntityKind
    scene: str = ""


@dataclass(frozen=True)
class CanvasResized:
    width: int
    height: int


@dataclass(frozen=True)
class OutputResized:
    width: int
    height: int


@dataclass(frozen=True)
class FinishedLoading:
    timestamp: float = field(default_factory=time.time)


class EventBus:
    """Minimal in-process event bus (best-effort)."""

    def __init__(self) -> None:
        self._subs: Dict[Type[Any], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[Any], callback: Callable[[Any], None]) -> None:
        self._subs.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: Type[Any], callback: Callable[[Any], None]) -> None:
        subs = self._subs.get(event_type, [])
        if callback in subs:
            subs.remove(callback)

    def emit(self, event: Any) -> None:
        for cb in list(self._subs.get(type(event), []) or []):
            try:
                cb(event)
            except Exception:
                # Best-effort: a failing subscriber never aborts bootstrap
                logging.getLogger(__name__).debug("Event handler failed.", exc_info=True)


class EventRecorder:
    """Subscribes to every lifecycle event and keeps them in order."""

    EVENT_TYPES = (
        ListChanged, Changed, SceneChanged, PreviewSceneChanged,
        CanvasResized, OutputResized, FinishedLoading,
    )

    def __init__(self, bus: EventBus) -> None:
        self.events: List[Any] = []
        for et in self.EVENT_TYPES:
            bus.subscribe(et, self.events.append)

    def of_type(self, event_type: Type[Any]) -> List[Any]:
        return [e for e in self.events if isinstance(e, event_type)]

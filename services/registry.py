# -*- coding: utf-8 -*-
"""Shared resolution / notification logic for profiles and scene collections.

Resolution precedence, highest first:
1. the name explicitly requested for this session, if it exists
2. the name persisted from the previous session, if it exists; when no
   listed entity carries that name (its config could not be read), the
   persisted file/directory name is tried before giving up
3. a new entity created under the persisted name

Activating a pre-existing entity publishes, in order: list-changed, changed,
scene-changed, preview-scene-changed. A freshly created entity publishes
nothing unless ``notify_on_create`` is set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Generic, Optional, TypeVar

from app.events import Changed, EntityKind, EventBus, ListChanged, PreviewSceneChanged, SceneChanged
from storage.entity_paths import FALLBACK_NAME

log = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class Resolution(Generic[E]):
    entity: E
    created: bool
    source: str  # "requested" | "persisted" | "created"


class EntityRegistry(Generic[E]):
    kind: EntityKind

    def __init__(self, bus: Optional[EventBus] = None, *, notify_on_create: bool = False) -> None:
        self.bus = bus or EventBus()
        self.notify_on_create = bool(notify_on_create)

    # implemented by subclasses
    def list(self) -> Dict[str, E]:
        raise NotImplementedError

    def create(self, name: str) -> E:
        raise NotImplementedError

    def find_stored(self, name: str, file_name: str) -> Optional[E]:
        """Entity stored under ``file_name`` on disk, reported as ``name``."""
        raise NotImplementedError

    def resolve(self, requested: str, persisted: str, persisted_file: str = "") -> Resolution[E]:
        existing = self.list()
        if requested and requested in existing:
            log.info("Using requested %s '%s'", self.kind.value, requested)
            return Resolution(existing[requested], False, "requested")
        if requested:
            log.warning("Requested %s '%s' not found", self.kind.value, requested)

        name = persisted or FALLBACK_NAME
        if name in existing:
            return Resolution(existing[name], False, "persisted")
        if persisted and persisted_file:
            stored = self.find_stored(persisted, persisted_file)
            if stored is not None:
                log.warning("Persisted %s '%s' resolved by its file name '%s'",
                            self.kind.value, persisted, persisted_file)
                return Resolution(stored, False, "persisted")

        log.info("Creating %s '%s'", self.kind.value, name)
        return Resolution(self.create(name), True, "created")

    def should_notify(self, resolution: Resolution[E]) -> bool:
        return not resolution.created or self.notify_on_create

    def publish_activation(self, name: str, scene: str = "", preview_scene: str = "") -> None:
        self.bus.emit(ListChanged(self.kind))
        self.bus.emit(Changed(self.kind, name))
        self.bus.emit(SceneChanged(self.kind, scene))
        self.bus.emit(PreviewSceneChanged(self.kind, preview_scene))

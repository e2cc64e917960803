# -*- coding: utf-8 -*-
"""Scene collection registry.

A scene collection is a JSON document in ``scenes_dir``. Its display name is
stored inside the document; the file name is derived from it once, at
creation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from app.events import EntityKind, EventBus
from app.session import SessionState
from core.keys import BasicKeys, Sections
from services.errors import FailureCause, StorageError
from services.registry import EntityRegistry, Resolution
from storage.config_store import ConfigStoreError
from storage.entity_paths import unused_path
from storage.scene_collection_io import (
    DocumentError,
    current_scenes,
    load_document,
    new_document,
    read_name,
    write_json_atomic,
)

log = logging.getLogger(__name__)

DOCUMENT_EXT = ".json"


@dataclass(frozen=True)
class SceneCollection:
    name: str
    path: Path

    @property
    def file_name(self) -> str:
        return self.path.stem


class SceneCollectionRegistry(EntityRegistry[SceneCollection]):
    kind = EntityKind.SCENE_COLLECTION

    def __init__(self, scenes_dir: Path, bus: Optional[EventBus] = None, *,
                 notify_on_create: bool = False) -> None:
        super().__init__(bus, notify_on_create=notify_on_create)
        self.scenes_dir = Path(scenes_dir)

    def list(self) -> Dict[str, SceneCollection]:
        try:
            self.scenes_dir.mkdir(parents=True, exist_ok=True)
            files = sorted(self.scenes_dir.glob(f"*{DOCUMENT_EXT}"))
        except OSError as e:
            raise StorageError(FailureCause.SCENE_COLLECTION_STORAGE, str(e)) from e

        collections: Dict[str, SceneCollection] = {}
        for f in files:
            name = read_name(f) or f.stem
            collections.setdefault(name, SceneCollection(name, f))
        return collections

    def find_stored(self, name: str, file_name: str) -> Optional[SceneCollection]:
        if Path(file_name).name != file_name or file_name == "..":
            return None
        path = self.scenes_dir / f"{file_name}{DOCUMENT_EXT}"
        return SceneCollection(name, path) if path.is_file() else None

    def create(self, name: str) -> SceneCollection:
        path = unused_path(self.scenes_dir, name, DOCUMENT_EXT)
        try:
            write_json_atomic(path, new_document(name))
        except OSError as e:
            raise StorageError(FailureCause.SCENE_COLLECTION_STORAGE, str(e)) from e
        return SceneCollection(name, path)

    def load(self, collection: SceneCollection) -> Dict[str, Any]:
        try:
            return load_document(collection.path)
        except DocumentError as e:
            raise StorageError(FailureCause.SCENE_COLLECTION_STORAGE, str(e)) from e

    def activate(self, resolution: Resolution[SceneCollection], session: SessionState) -> SessionState:
        collection = resolution.entity
        doc = self.load(collection)

        cfg = session.user_config
        cfg.set(Sections.BASIC, BasicKeys.SCENE_COLLECTION, collection.name)
        cfg.set(Sections.BASIC, BasicKeys.SCENE_COLLECTION_FILE, collection.file_name)
        try:
            cfg.save_safe("tmp", "bak")
        except ConfigStoreError as e:
            raise StorageError(FailureCause.SCENE_COLLECTION_STORAGE, str(e)) from e

        if self.should_notify(resolution):
            scene, program = current_scenes(doc)
            # program scene drives output; current_scene is the preview
            self.publish_activation(collection.name, scene=program, preview_scene=scene)
        else:
            log.debug("Scene collection '%s' created; activation events not published", collection.name)
        log.info("Scene collection active: %s (%s)", collection.name, resolution.source)
        return replace(
            session,
            scene_collection=collection,
            collection_created=resolution.created,
            document=doc,
        )

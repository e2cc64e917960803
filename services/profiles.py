# -*- coding: utf-8 -*-
"""Profile registry.

A profile is a directory under ``profiles_dir`` holding ``basic.ini`` (its
ConfigStore) plus profile-relative files such as ``service.json``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from app.events import EntityKind, EventBus
from app.session import SessionState
from core.keys import BasicKeys, GeneralKeys, Sections
from services.errors import ConfigLoadError, FailureCause, StorageError
from services.registry import EntityRegistry, Resolution
from storage.config_store import ConfigStore, ConfigStoreError
from storage.entity_paths import unused_path

log = logging.getLogger(__name__)

PROFILE_CONFIG = "basic.ini"


@dataclass(frozen=True)
class Profile:
    name: str
    directory: Path

    @property
    def config_path(self) -> Path:
        return self.directory / PROFILE_CONFIG


class ProfileRegistry(EntityRegistry[Profile]):
    kind = EntityKind.PROFILE

    def __init__(self, profiles_dir: Path, bus: Optional[EventBus] = None, *,
                 notify_on_create: bool = False) -> None:
        super().__init__(bus, notify_on_create=notify_on_create)
        self.profiles_dir = Path(profiles_dir)

    def list(self) -> Dict[str, Profile]:
        try:
            self.profiles_dir.mkdir(parents=True, exist_ok=True)
            dirs = sorted(p for p in self.profiles_dir.iterdir() if p.is_dir())
        except OSError as e:
            raise StorageError(FailureCause.PROFILE_STORAGE, str(e)) from e

        profiles: Dict[str, Profile] = {}
        for d in dirs:
            ini = d / PROFILE_CONFIG
            if not ini.is_file():
                continue
            name = d.name
            try:
                name = ConfigStore.open(ini).get_string(Sections.GENERAL, GeneralKeys.NAME, d.name) or d.name
            except ConfigStoreError:
                log.warning("Profile config unreadable: %s", ini)
            profiles.setdefault(name, Profile(name, d))
        return profiles

    def find_stored(self, name: str, file_name: str) -> Optional[Profile]:
        if Path(file_name).name != file_name or file_name == "..":
            return None
        directory = self.profiles_dir / file_name
        if not (directory / PROFILE_CONFIG).is_file():
            return None
        return Profile(name, directory)

    def create(self, name: str) -> Profile:
        directory = unused_path(self.profiles_dir, name)
        store = ConfigStore(directory / PROFILE_CONFIG)
        store.set(Sections.GENERAL, GeneralKeys.NAME, name)
        try:
            directory.mkdir(parents=True, exist_ok=False)
            store.save_safe("tmp")
        except (OSError, ConfigStoreError) as e:
            raise StorageError(FailureCause.PROFILE_STORAGE, str(e)) from e
        return Profile(name, directory)

    def load(self, profile: Profile) -> ConfigStore:
        try:
            return ConfigStore.open(profile.config_path)
        except ConfigStoreError as e:
            raise ConfigLoadError(str(e)) from e

    def activate(self, resolution: Resolution[Profile], session: SessionState) -> SessionState:
        """Make the resolved profile the session's active one.

        The profile's store is loaded here unless an earlier stage already did.
        """
        profile = resolution.entity
        config = session.config if session.config is not None else self.load(profile)

        cfg = session.user_config
        cfg.set(Sections.BASIC, BasicKeys.PROFILE, profile.name)
        cfg.set(Sections.BASIC, BasicKeys.PROFILE_DIR, profile.directory.name)
        try:
            cfg.save_safe("tmp", "bak")
        except ConfigStoreError as e:
            raise StorageError(FailureCause.PROFILE_STORAGE, str(e)) from e

        if self.should_notify(resolution):
            self.publish_activation(profile.name)
        else:
            log.debug("Profile '%s' created; activation events not published", profile.name)
        log.info("Profile active: %s (%s)", profile.name, resolution.source)
        return replace(session, profile=profile, profile_created=resolution.created, config=config)

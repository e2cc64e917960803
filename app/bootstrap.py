# -*- coding: utf-8 -*-
"""
Application bootstrap: from "process started" to "ready for interaction".

Stages run once, in this order, with no way back:

    ConfigLoaded -> DefaultsInstalled -> AudioReady -> VideoReady
    -> ModulesLoaded -> ProfileActive -> CollectionActive -> UIVisible

- defaults must exist before any subsystem reads the store
- audio/video must be up before modules load (modules may use them)
- modules load before profile/collection activation (they may read
  profile-relative paths while initialising)
- profile before scene collection (collection lookup may be profile-relative)

Fatal failures raise ``BootstrapError`` at the point of detection; ``run``
turns the first one into the outcome. Module load failures are collected and
reported, never fatal. Nothing is retried.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple

from app import config as build_config
from app.events import EventBus, FinishedLoading
from app.session import BootstrapState, LaunchOptions, SessionState
from core.keys import BasicKeys, GeneralKeys, Sections
from core.types import LegacyFlags
from infra import paths
from infra.defaults import install_defaults
from infra.migrations import migrate_user_config
from infra.perf import is_enabled as perf_enabled
from infra.perf import recorded, span
from infra.probes import DisplayProbe, EncoderProbe, NoDisplayError
from infra.settings import load_user_config
from services.errors import (
    AudioInitError,
    BootstrapError,
    ConfigLoadError,
    FailureCause,
    Issue,
    VideoInitError,
)
from services.module_loader import ModuleLoader
from services.module_policy import ModuleClassification, ModuleLoadPolicy, extra_module_paths
from services.profiles import ProfileRegistry
from services.scene_collections import SceneCollectionRegistry
from services.service_settings import ServiceSettings, init_service
from services.subsystems import (
    AudioPipeline,
    AudioResetter,
    InitResult,
    NoActiveOutputs,
    OutputState,
    VideoPipeline,
    VideoResetter,
)
from storage.config_store import ConfigStoreError
from storage.migrations import migrate

log = logging.getLogger(__name__)

STARTUP_SEPARATOR = "==== Startup complete ==============================================="

VIDEO_FAILURES = {
    InitResult.MODULE_NOT_FOUND: FailureCause.VIDEO_MODULE_NOT_FOUND,
    InitResult.NOT_SUPPORTED: FailureCause.VIDEO_NOT_SUPPORTED,
    InitResult.INVALID_PARAM: FailureCause.VIDEO_INVALID_PARAM,
}


@dataclass
class Collaborators:
    display: DisplayProbe
    encoders: EncoderProbe
    video: VideoPipeline
    audio: AudioPipeline
    modules: ModuleLoader
    outputs: OutputState = field(default_factory=NoActiveOutputs)
    bus: EventBus = field(default_factory=EventBus)
    service_init: Callable[[Path], ServiceSettings] = init_service


@dataclass(frozen=True)
class BootstrapOutcome:
    ok: bool
    state: BootstrapState
    session: Optional[SessionState] = None
    error: Optional[BootstrapError] = None
    failed_modules: Tuple[str, ...] = ()
    issues: Tuple[Issue, ...] = ()

    @property
    def reason(self) -> str:
        return self.error.message if self.error else ""


class BootstrapOrchestrator:
    def __init__(
        self,
        collaborators: Collaborators,
        *,
        options: Optional[LaunchOptions] = None,
        version: str = "0.0.0",
        user_config_path: Optional[Path] = None,
        profiles_dir: Optional[Path] = None,
        scenes_dir: Optional[Path] = None,
        plugins_dir: Optional[Path] = None,
        classification: Optional[ModuleClassification] = None,
        env: Optional[Mapping[str, str]] = None,
        notify_on_create: Optional[bool] = None,
        graphics_module: Optional[str] = None,
    ) -> None:
        self.c = collaborators
        self.options = options or LaunchOptions()
        self.version = version
        self.user_config_path = user_config_path or paths.user_config_path()
        self.plugins_dir = plugins_dir or paths.plugins_dir()
        self.env = os.environ if env is None else env
        self.classification = classification

        notify = build_config.NOTIFY_ON_CREATE if notify_on_create is None else notify_on_create
        self.profiles = ProfileRegistry(profiles_dir or paths.profiles_dir(), self.c.bus, notify_on_create=notify)
        self.collections = SceneCollectionRegistry(scenes_dir or paths.scenes_dir(), self.c.bus,
                                                   notify_on_create=notify)
        self.video = VideoResetter(self.c.video, self.c.outputs, self.c.bus,
                                   graphics_module or build_config.RENDER_MODULE)
        self.audio = AudioResetter(self.c.audio)
        self._issues: List[Issue] = []

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def run(self) -> BootstrapOutcome:
        state = BootstrapState.STARTING
        session: Optional[SessionState] = None
        try:
            policy = self._module_policy()
            with span("bootstrap.load_config"):
                session = self._load_config()
            state = session.state

            stages: List[Tuple[BootstrapState, Callable[[SessionState], SessionState]]] = [
                (BootstrapState.DEFAULTS_INSTALLED, self._install_defaults),
                (BootstrapState.AUDIO_READY, self._reset_audio),
                (BootstrapState.VIDEO_READY, self._reset_video),
                (BootstrapState.MODULES_LOADED, lambda s: self._load_modules(s, policy)),
                (BootstrapState.PROFILE_ACTIVE, self._activate_profile),
                (BootstrapState.COLLECTION_ACTIVE, self._activate_collection),
                (BootstrapState.UI_VISIBLE, self._finish),
            ]
            for target, stage in stages:
                with span(f"bootstrap.{target.value}"):
                    session = replace(stage(session), state=target)
                state = target
                log.debug("Bootstrap state: %s", state.value)
        except BootstrapError as e:
            log.error("Bootstrap failed after %s: %s %s", state.value, e.message, e.detail)
            return BootstrapOutcome(
                ok=False,
                state=state,
                session=session,
                error=e,
                failed_modules=session.failed_modules if session else (),
                issues=tuple(self._issues),
            )

        if perf_enabled():
            total = sum(ms for label, ms in recorded() if label.startswith("bootstrap."))
            log.info("Startup stages took %.1fms", total)
        log.info(STARTUP_SEPARATOR)
        return BootstrapOutcome(
            ok=True,
            state=state,
            session=session,
            failed_modules=session.failed_modules,
            issues=tuple(self._issues),
        )

    def _module_policy(self) -> ModuleLoadPolicy:
        if self.classification is not None:
            return ModuleLoadPolicy(self.classification)
        result = ModuleClassification.from_build_config(
            build_config.SAFE_MODULES, build_config.UNSAFE_MODULES
        )
        return ModuleLoadPolicy(result.unwrap())

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _load_config(self) -> SessionState:
        try:
            user_config = load_user_config(self.user_config_path)
        except ConfigStoreError as e:
            raise ConfigLoadError(str(e)) from e

        if migrate_user_config(user_config, self.version):
            self._save(user_config, "user.ini", backup=True)

        persisted = user_config.get_string(Sections.BASIC, BasicKeys.PROFILE)
        persisted_dir = user_config.get_string(Sections.BASIC, BasicKeys.PROFILE_DIR)
        resolution = self.profiles.resolve(self.options.profile, persisted, persisted_dir)
        config = self.profiles.load(resolution.entity)
        log.info("Profile config loaded: %s", resolution.entity.config_path)
        return SessionState(
            user_config=user_config,
            options=self.options,
            state=BootstrapState.CONFIG_LOADED,
            profile_resolution=resolution,
            config=config,
        )

    def _install_defaults(self, session: SessionState) -> SessionState:
        config = session.config
        flags = LegacyFlags.from_user_config(session.user_config)
        changed = migrate(config, flags)
        try:
            pinned = install_defaults(config, self.c.display, self.c.encoders, flags)
        except NoDisplayError as e:
            raise ConfigLoadError(str(e)) from e
        if changed or pinned:
            self._save(config, "basic.ini")
        return session

    def _reset_audio(self, session: SessionState) -> SessionState:
        if not self.audio.reset(session.config):
            raise AudioInitError()
        return session

    def _reset_video(self, session: SessionState) -> SessionState:
        result = self.video.reset(session.config)
        if result != InitResult.SUCCESS:
            raise VideoInitError(VIDEO_FAILURES.get(result, FailureCause.VIDEO_UNKNOWN), result.name)
        self.audio.apply_monitoring_device(session.config)
        return session

    def _load_modules(self, session: SessionState, policy: ModuleLoadPolicy) -> SessionState:
        opts = session.options
        allow_list = policy.allow_list(opts.safe_mode, opts.disable_third_party)
        search_paths = []
        if allow_list.unrestricted:
            search_paths = extra_module_paths(self.env, portable=opts.portable, plugins_dir=self.plugins_dir)
        else:
            log.info("Restricted module loading: %s", ", ".join(sorted(allow_list.modules or ())))

        report = self.c.modules.load_all(allow_list, search_paths)
        if report.failed:
            log.warning("Modules failed to load: %s", ", ".join(report.failed))
        self._issues.extend(report.issues())
        log.info("Modules loaded: %d (failed %d)", len(report.loaded), len(report.failed))
        return replace(session, failed_modules=tuple(report.failed))

    def _activate_profile(self, session: SessionState) -> SessionState:
        session = self.profiles.activate(session.profile_resolution, session)
        service = self.c.service_init(session.profile.directory)
        return replace(session, service=service)

    def _activate_collection(self, session: SessionState) -> SessionState:
        cfg = session.user_config
        persisted = cfg.get_string(Sections.BASIC, BasicKeys.SCENE_COLLECTION)
        persisted_file = cfg.get_string(Sections.BASIC, BasicKeys.SCENE_COLLECTION_FILE)
        resolution = self.collections.resolve(self.options.collection, persisted, persisted_file)
        return self.collections.activate(resolution, session)

    def _finish(self, session: SessionState) -> SessionState:
        cfg = session.user_config
        first_run = not cfg.get_bool(Sections.GENERAL, GeneralKeys.FIRST_RUN)
        if first_run:
            cfg.set(Sections.GENERAL, GeneralKeys.FIRST_RUN, True)
            self._save(cfg, "user.ini", backup=True)
        self.c.bus.emit(FinishedLoading())
        return replace(session, first_run=first_run, loaded=True)

    @staticmethod
    def _save(store, label: str, *, backup: bool = False) -> None:
        try:
            store.save_safe("tmp", "bak" if backup else None)
        except ConfigStoreError:
            # the in-memory state is still valid; next save retries the write
            log.warning("Could not save %s", label, exc_info=True)


def bootstrap(options: Optional[LaunchOptions] = None) -> None:
    """Process-level setup that runs before any stage (logging, crash hooks)."""
    from infra.crash_handler import install_global_exception_handlers
    from infra.logging_setup import init_logging, init_perf_logging

    options = options or LaunchOptions()
    paths.set_portable_mode(options.portable)
    init_logging(level=logging.DEBUG if options.verbose else logging.INFO)
    if perf_enabled():
        init_perf_logging()
    install_global_exception_handlers()

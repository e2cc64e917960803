# -*- coding: utf-8 -*-
"""Display geometry and encoder capability probes.

These are read-only collaborators. The Qt display probe imports PyQt5 lazily so
the rest of the engine (and its tests) stays PyQt-free.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Protocol

log = logging.getLogger(__name__)


class NoDisplayError(RuntimeError):
    pass


@dataclass(frozen=True)
class DisplayGeometry:
    width: int
    height: int
    device_pixel_ratio: float = 1.0

    @property
    def pixel_width(self) -> int:
        return int(self.width * self.device_pixel_ratio)

    @property
    def pixel_height(self) -> int:
        return int(self.height * self.device_pixel_ratio)


class DisplayProbe(Protocol):
    def primary_display(self) -> DisplayGeometry: ...


class EncoderProbe(Protocol):
    def available(self, encoder_id: str) -> bool: ...

    def encoders(self) -> List[str]: ...


@dataclass
class StaticDisplayProbe:
    geometry: DisplayGeometry = field(default_factory=lambda: DisplayGeometry(1920, 1080))

    def primary_display(self) -> DisplayGeometry:
        return self.geometry


class QtDisplayProbe:
    """Primary screen size from a running QGuiApplication/QApplication."""

    def primary_display(self) -> DisplayGeometry:
        from PyQt5.QtGui import QGuiApplication

        if not QGuiApplication.screens():
            raise NoDisplayError("There appears to be no monitors.")
        screen = QGuiApplication.primaryScreen()
        size = screen.size()
        return DisplayGeometry(size.width(), size.height(), float(screen.devicePixelRatio()))


class StaticEncoderProbe:
    def __init__(self, available: Iterable[str] = ()) -> None:
        self._available: FrozenSet[str] = frozenset(available)

    def available(self, encoder_id: str) -> bool:
        return encoder_id in self._available

    def encoders(self) -> List[str]:
        return sorted(self._available)


def log_encoders(probe: EncoderProbe) -> None:
    log.info("---------------------------------")
    log.info("Available Encoders:")
    for encoder_id in probe.encoders():
        log.info("\t- %s", encoder_id)

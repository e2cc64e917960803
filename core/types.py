# -*- coding: utf-8 -*-
"""Shared domain types (pure, test-friendly)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from core.keys import GeneralKeys, Sections


class ScaleType(IntEnum):
    DISABLE = 0
    POINT = 1
    BICUBIC = 2
    BILINEAR = 3
    LANCZOS = 4
    AREA = 5


@dataclass(frozen=True)
class LegacyFlags:
    """Behaviour switches for users upgrading from older releases.

    Read from the global user config, where ``infra.migrations`` sets them the
    first time a newer version runs over an older install.
    """

    pre19_defaults: bool = False
    pre21_defaults: bool = False
    pre23_defaults: bool = False
    pre24_1_defaults: bool = False

    @classmethod
    def from_user_config(cls, user_config) -> "LegacyFlags":
        g = Sections.GENERAL
        return cls(
            pre19_defaults=user_config.get_bool(g, GeneralKeys.PRE19_DEFAULTS),
            pre21_defaults=user_config.get_bool(g, GeneralKeys.PRE21_DEFAULTS),
            pre23_defaults=user_config.get_bool(g, GeneralKeys.PRE23_DEFAULTS),
            pre24_1_defaults=user_config.get_bool(g, GeneralKeys.PRE24_1_DEFAULTS),
        )


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    @property
    def pixels(self) -> int:
        return self.width * self.height

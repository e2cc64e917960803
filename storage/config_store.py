# -*- coding: utf-8 -*-
"""storage/config_store.py

Typed section/key/value store backed by an INI file.

Two layers are kept per store:
- *user values*: loaded from / saved to disk.
- *defaults*: installed at startup, never persisted.

Getters read the user value, then the default, then the caller fallback.
``has_user_value`` only looks at the user layer; migrations and the defaults
installer rely on that distinction.

Saves follow a write-to-temp-then-rename discipline (``save_safe``) so a crash
mid-write cannot corrupt the previous good copy.
"""

from __future__ import annotations

import configparser
import io
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Union

log = logging.getLogger(__name__)

Value = Union[str, int, float, bool]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigStoreError(Exception):
    """Raised when a config file exists but cannot be read or written."""


# ---------------------------------------------------------------------------
# Raw value parsing (None means "malformed")
# ---------------------------------------------------------------------------

def parse_bool(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    v = str(raw).strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return None


def parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def parse_uint(raw: Optional[str]) -> Optional[int]:
    v = parse_int(raw)
    if v is None or v < 0:
        return None
    return v


def parse_double(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        return float(str(raw).strip())
    except ValueError:
        return None


def format_value(value: Value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _clean_lines(text: str) -> str:
    kept: List[str] = []
    in_section = False
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in ";#":
            continue
        if len(line) > 2 and line.startswith("[") and line.endswith("]"):
            in_section = True
        elif not in_section or "=" not in line or line.startswith("="):
            continue
        kept.append(line)
    return "\n".join(kept) + "\n"


def discard_file(path: Path) -> None:
    """Remove a leftover temp file after a failed write."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError:
        log.warning("Could not remove %s", path, exc_info=True)


class ConfigStore:
    """Ordered INI-backed configuration with a separate defaults layer."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path: Optional[Path] = Path(path) if path else None
        self._user: Dict[str, Dict[str, str]] = {}
        self._defaults: Dict[str, Dict[str, str]] = {}

    # ---- loading / saving ----

    @classmethod
    def open(cls, path: Union[str, Path], *, create: bool = True) -> "ConfigStore":
        """Load ``path``; a missing file yields an empty store when ``create``."""
        store = cls(path)
        p = Path(path)
        if not p.exists():
            if not create:
                raise ConfigStoreError(f"Config file not found: {p}")
            return store
        try:
            text = p.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigStoreError(f"Cannot read {p}: {e}") from e
        store.loads(text)
        return store

    def loads(self, text: str) -> None:
        """Parse INI text into the user layer.

        Lines that are neither a section header nor ``key=value`` are skipped,
        and so are keys before the first section.
        """
        parser = self._parser()
        try:
            parser.read_string(_clean_lines(text))
        except configparser.Error as e:
            raise ConfigStoreError(f"Malformed config {self.path or '<memory>'}: {e}") from e
        self._user = {s: dict(parser.items(s)) for s in parser.sections()}

    def dumps(self) -> str:
        parser = self._parser()
        for section, values in self._user.items():
            if not values:
                continue
            parser.add_section(section)
            for key, raw in values.items():
                parser.set(section, key, raw)
        buf = io.StringIO()
        parser.write(buf, space_around_delimiters=False)
        return buf.getvalue()

    def save_safe(self, temp_ext: str = "tmp", backup_ext: Optional[str] = None) -> None:
        """Write to ``<file>.<temp_ext>`` then atomically rename over the target."""
        if self.path is None:
            raise ConfigStoreError("ConfigStore has no backing file")
        target = self.path
        tmp = target.with_name(f"{target.name}.{temp_ext}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(self.dumps())
                f.flush()
                os.fsync(f.fileno())
            if backup_ext and target.exists():
                shutil.copy2(target, target.with_name(f"{target.name}.{backup_ext}"))
            os.replace(tmp, target)
        except OSError as e:
            discard_file(tmp)
            raise ConfigStoreError(f"Cannot save {target}: {e}") from e
        log.debug("Saved config %s", target)

    @staticmethod
    def _parser() -> configparser.ConfigParser:
        parser = configparser.ConfigParser(interpolation=None, strict=False, delimiters=("=",))
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        return parser

    # ---- raw access ----

    def has_user_value(self, section: str, key: str) -> bool:
        return key in self._user.get(section, {})

    def get_raw(self, section: str, key: str) -> Optional[str]:
        if key in self._user.get(section, {}):
            return self._user[section][key]
        return self._defaults.get(section, {}).get(key)

    def get_user_raw(self, section: str, key: str) -> Optional[str]:
        return self._user.get(section, {}).get(key)

    # ---- typed getters ----

    def get_string(self, section: str, key: str, fallback: str = "") -> str:
        raw = self.get_raw(section, key)
        return fallback if raw is None else raw

    def get_int(self, section: str, key: str, fallback: int = 0) -> int:
        v = parse_int(self.get_raw(section, key))
        return fallback if v is None else v

    def get_uint(self, section: str, key: str, fallback: int = 0) -> int:
        v = parse_uint(self.get_raw(section, key))
        return fallback if v is None else v

    def get_bool(self, section: str, key: str, fallback: bool = False) -> bool:
        v = parse_bool(self.get_raw(section, key))
        return fallback if v is None else v

    def get_double(self, section: str, key: str, fallback: float = 0.0) -> float:
        v = parse_double(self.get_raw(section, key))
        return fallback if v is None else v

    # ---- mutation ----

    def set(self, section: str, key: str, value: Value) -> None:
        self._user.setdefault(section, {})[key] = format_value(value)

    def set_default(self, section: str, key: str, value: Value) -> None:
        self._defaults.setdefault(section, {})[key] = format_value(value)

    def remove(self, section: str, key: str) -> bool:
        values = self._user.get(section)
        if not values or key not in values:
            return False
        del values[key]
        if not values:
            del self._user[section]
        return True

    def snapshot(self) -> Dict[str, Dict[str, str]]:
        """Copy of the user layer (used by tests and diagnostics)."""
        return {s: dict(v) for s, v in self._user.items()}

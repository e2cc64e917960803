# -*- coding: utf-8 -*-
"""Extension module loader collaborator.

The bootstrap only hands over an ``AllowList`` and extra search paths and reads
back a ``ModuleLoadReport``. The default loader discovers Python modules from:

- installed distributions exposing the ``studio.modules`` entry-point group
- ``<bin_path>/<module>.py`` files under each extra search path

A module is a callable (entry point) or a file defining ``module_load()``;
returning False or raising marks it failed. Failures never stop the pass.
"""
from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Callable, Dict, List, Protocol, Sequence

from services.errors import Issue, Level
from services.module_policy import MODULE_PLACEHOLDER, AllowList, ModuleSearchPath

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "studio.modules"


@dataclass
class ModuleLoadReport:
    loaded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def issues(self) -> List[Issue]:
        return [
            Issue(Level.WARNING, "module_load_failed", f"Module failed to load: {name}", field=name)
            for name in self.failed
        ]


class ModuleLoader(Protocol):
    def load_all(self, allow_list: AllowList, search_paths: Sequence[ModuleSearchPath]) -> ModuleLoadReport: ...


def _discover_entry_points() -> Dict[str, Callable[[], Callable]]:
    found: Dict[str, Callable[[], Callable]] = {}
    for ep in metadata.entry_points(group=ENTRY_POINT_GROUP):
        found.setdefault(ep.name, ep.load)
    return found


def _discover_files(search_paths: Sequence[ModuleSearchPath]) -> Dict[str, Path]:
    found: Dict[str, Path] = {}
    for sp in search_paths:
        if MODULE_PLACEHOLDER not in sp.bin_path:
            root = Path(sp.bin_path)
            if root.is_dir():
                for f in sorted(root.glob("*.py")):
                    found.setdefault(f.stem, f)
            continue
        prefix = sp.bin_path.split(MODULE_PLACEHOLDER, 1)[0]
        root = Path(prefix)
        if not root.is_dir():
            continue
        for sub in sorted(p for p in root.iterdir() if p.is_dir()):
            candidate = Path(sp.bin_path.replace(MODULE_PLACEHOLDER, sub.name)) / f"{sub.name}.py"
            if candidate.is_file():
                found.setdefault(sub.name, candidate)
    return found


def _load_file(name: str, path: Path) -> Callable:
    spec = importlib.util.spec_from_file_location(f"studio_module_{name.replace('-', '_')}", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return getattr(mod, "module_load")


class PythonModuleLoader:
    def __init__(self, entry_points: Callable[[], Dict[str, Callable[[], Callable]]] = _discover_entry_points) -> None:
        self._entry_points = entry_points

    def load_all(self, allow_list: AllowList, search_paths: Sequence[ModuleSearchPath]) -> ModuleLoadReport:
        report = ModuleLoadReport()
        candidates: Dict[str, Callable[[], Callable]] = dict(self._entry_points())
        for name, path in _discover_files(search_paths).items():
            candidates.setdefault(name, lambda n=name, p=path: _load_file(n, p))

        for name in sorted(candidates):
            if not allow_list.allows(name):
                log.info("Module '%s' not loaded (not in allow-list)", name)
                report.skipped.append(name)
                continue
            try:
                entry = candidates[name]()
                ok = entry() if callable(entry) else True
            except Exception:
                log.warning("Module '%s' failed to load", name, exc_info=True)
                report.failed.append(name)
                continue
            if ok is False:
                log.warning("Module '%s' reported load failure", name)
                report.failed.append(name)
            else:
                report.loaded.append(name)
        return report

# -*- coding: utf-8 -*-
"""Extension module load policy (pure, no IO).

Which modules may load is decided from two startup flags and the build-time
classification in ``app/config.py``:

=================  ======================  =============================
safety_restricted  disallow_third_party    allow-list
=================  ======================  =============================
False              False                   unrestricted
True               False                   core
False              True                    core + unsafe first-party
True               True                    core + unsafe first-party
=================  ======================  =============================

First-party modules are never dropped merely because third-party code is
disallowed.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Generic, Iterable, List, Mapping, Optional, TypeVar

from services.errors import BootstrapError, BuildConfigError

log = logging.getLogger(__name__)

T = TypeVar("T")

MODULE_PLACEHOLDER = "%module%"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Value-or-error returned by constructors that read build configuration."""

    value: Optional[T] = None
    error: Optional[BootstrapError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value


@dataclass(frozen=True)
class AllowList:
    """``modules is None`` means no restriction."""

    modules: Optional[FrozenSet[str]] = None

    @property
    def unrestricted(self) -> bool:
        return self.modules is None

    def allows(self, module_id: str) -> bool:
        return self.modules is None or module_id in self.modules


UNRESTRICTED = AllowList(None)


@dataclass(frozen=True)
class ModuleClassification:
    core: FrozenSet[str]
    unsafe: FrozenSet[str]

    @classmethod
    def from_build_config(
        cls, safe_modules: Optional[str], unsafe_modules: Iterable[str] = ()
    ) -> Result["ModuleClassification"]:
        if safe_modules is None:
            return Result(error=BuildConfigError("SAFE_MODULES not defined"))
        names = [m.strip() for m in str(safe_modules).split("|") if m.strip()]
        if not names:
            return Result(error=BuildConfigError("SAFE_MODULES is empty"))
        unsafe_set = frozenset(unsafe_modules)
        shipped = frozenset(names)
        return Result(value=cls(core=shipped - unsafe_set, unsafe=shipped & unsafe_set))


class ModuleLoadPolicy:
    def __init__(self, classification: ModuleClassification) -> None:
        self.classification = classification

    def allow_list(self, safety_restricted: bool, disallow_third_party: bool) -> AllowList:
        if not safety_restricted and not disallow_third_party:
            return UNRESTRICTED
        allowed = set(self.classification.core)
        if disallow_third_party:
            allowed |= self.classification.unsafe
        return AllowList(frozenset(allowed))


@dataclass(frozen=True)
class ModuleSearchPath:
    bin_path: str
    data_path: str


def extra_module_paths(
    env: Mapping[str, str],
    *,
    portable: bool,
    plugins_dir: Path,
    platform: Optional[str] = None,
) -> List[ModuleSearchPath]:
    """Additional module locations outside the install, for unrestricted runs.

    STUDIO_PLUGINS_PATH + STUDIO_PLUGINS_DATA_PATH (both required) come first,
    then the per-user plugins directory unless running portable.
    """
    platform = platform or sys.platform
    paths: List[ModuleSearchPath] = []

    plugins_path = env.get("STUDIO_PLUGINS_PATH", "")
    plugins_data_path = env.get("STUDIO_PLUGINS_DATA_PATH", "")
    if plugins_path and plugins_data_path:
        if platform == "darwin":
            paths.append(ModuleSearchPath(
                f"{plugins_path}/{MODULE_PLACEHOLDER}.plugin/Contents/MacOS",
                f"{plugins_data_path}/{MODULE_PLACEHOLDER}.plugin/Contents/Resources",
            ))
        else:
            paths.append(ModuleSearchPath(plugins_path, f"{plugins_data_path}/{MODULE_PLACEHOLDER}"))

    if portable:
        return paths

    if platform == "darwin":
        base = f"{plugins_dir.as_posix()}/{MODULE_PLACEHOLDER}.plugin"
        paths.append(ModuleSearchPath(f"{base}/Contents/MacOS", f"{base}/Contents/Resources"))
    else:
        base = f"{plugins_dir.as_posix()}/{MODULE_PLACEHOLDER}"
        paths.append(ModuleSearchPath(f"{base}/bin/64bit", f"{base}/data"))
    return paths

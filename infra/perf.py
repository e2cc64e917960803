# -*- coding: utf-8 -*-
"""Startup timing spans.

Every bootstrap stage and subsystem reset runs inside ``span``. With
``STUDIO_PERF=1`` each span is logged to ``studio.perf`` and kept in
``recorded()`` so the bootstrap can print a per-stage summary; otherwise
``span`` costs one dict lookup.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator, List, Tuple

log = logging.getLogger("studio.perf")

_timings: List[Tuple[str, float]] = []


def is_enabled() -> bool:
    return os.environ.get("STUDIO_PERF", "").strip().lower() in ("1", "true", "yes", "on")


def recorded() -> List[Tuple[str, float]]:
    """(label, milliseconds) for every span closed so far, oldest first."""
    return list(_timings)


def clear() -> None:
    _timings.clear()


@contextmanager
def span(label: str, *, threshold_ms: float = 0.0) -> Iterator[None]:
    if not is_enabled():
        yield
        return
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed = (time.perf_counter() - started) * 1000.0
        _timings.append((label, elapsed))
        if elapsed >= threshold_ms:
            log.info("PERF %s %.1fms", label, elapsed)

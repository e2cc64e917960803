# -*- coding: utf-8 -*-
"""Build-time configuration.

This module is intentionally tiny and *import-safe*.

Module classification
---------------------
``SAFE_MODULES`` lists every first-party module shipped with the build,
``|``-separated (the same shape the packaging pipeline emits). Modules that
also appear in ``UNSAFE_MODULES`` let external code change application state
(scripting, remote control); they are dropped in safe mode.

Notifications
-------------
``NOTIFY_ON_CREATE`` controls whether creating a brand-new profile or scene
collection at startup emits the same lifecycle events as activating an
existing one. Historically it does not; kept off pending product decision.
"""

from __future__ import annotations

import logging

SAFE_MODULES: str = "|".join([
    "image-source",
    "rtmp-services",
    "ffmpeg-encoders",
    "x264-encoder",
    "outputs",
    "filters",
    "text-freetype",
    "frontend-tools",
    "websocket",
])

# First-party modules considered unsafe in safe mode: they allow external code
# (e.g. scripts, remote clients) to modify application state.
UNSAFE_MODULES: frozenset = frozenset({
    "frontend-tools",
    "websocket",
})

NOTIFY_ON_CREATE: bool = False

# Graphics backend handed to the video pipeline.
RENDER_MODULE: str = "opengl"


# --- Build overrides (optional) ---
# When packaging, the build pipeline may include a `build_config.json` resource.
try:
    import json
    from infra.paths import resource_path
    _bc_path = resource_path("build_config.json")
    if _bc_path.exists():
        with open(_bc_path, "r", encoding="utf-8") as _f:
            _bc = json.load(_f) or {}
        SAFE_MODULES = str(_bc.get("SAFE_MODULES", SAFE_MODULES))
        if "UNSAFE_MODULES" in _bc:
            UNSAFE_MODULES = frozenset(str(m) for m in _bc["UNSAFE_MODULES"])
        NOTIFY_ON_CREATE = bool(_bc.get("NOTIFY_ON_CREATE", NOTIFY_ON_CREATE))
        RENDER_MODULE = str(_bc.get("RENDER_MODULE", RENDER_MODULE))
except Exception:
    # Never crash on config overrides.
    logging.getLogger(__name__).debug("build_config.json ignored", exc_info=True)

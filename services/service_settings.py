# -*- coding: utf-8 -*-
"""Streaming service settings (``service.json`` in the profile directory).

Loading falls back to a default service when the file is missing or unusable.
Only a failure to write that default is fatal for the bootstrap.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from services.errors import ServiceInitError
from storage.scene_collection_io import write_json_atomic

log = logging.getLogger(__name__)

SERVICE_FILE = "service.json"
DEFAULT_SERVICE_TYPE = "rtmp_common"


@dataclass
class ServiceSettings:
    type: str = DEFAULT_SERVICE_TYPE
    settings: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "settings": dict(self.settings)}


def _read(path: Path) -> ServiceSettings:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not str(data.get("type") or "").strip():
        raise ValueError("service.json has no service type")
    settings = data.get("settings")
    return ServiceSettings(type=str(data["type"]), settings=settings if isinstance(settings, dict) else {})


def init_service(profile_dir: Path) -> ServiceSettings:
    path = Path(profile_dir) / SERVICE_FILE
    if path.exists():
        try:
            service = _read(path)
            log.info("Service loaded: %s", service.type)
            return service
        except (OSError, ValueError) as e:
            log.warning("service.json unusable (%s); falling back to default service", e)

    service = ServiceSettings()
    try:
        write_json_atomic(path, service.to_dict(), backup=True)
    except OSError as e:
        raise ServiceInitError(str(e)) from e
    log.info("Default service created at %s", path)
    return service

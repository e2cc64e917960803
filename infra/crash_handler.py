# -*- coding: utf-8 -*-
"""Process-wide hooks for exceptions nobody caught.

The bootstrap boundary only converts ``BootstrapError``; anything else that
escapes (a bug, a collaborator blowing up) ends here and is written to the
``studio.crash`` logger before the interpreter's default handling.
"""

from __future__ import annotations

import logging
import sys
import threading
import traceback
from types import TracebackType
from typing import Optional, Type

log = logging.getLogger("studio.crash")

_in_hook = False


def report_crash(exc_type: Type[BaseException], exc: BaseException, tb: Optional[TracebackType]) -> None:
    global _in_hook
    if _in_hook:
        # crashed while reporting a crash; stderr only
        sys.__stderr__.write("".join(traceback.format_exception(exc_type, exc, tb)))
        return
    _in_hook = True
    try:
        log.critical("Unhandled exception", exc_info=(exc_type, exc, tb))
    finally:
        _in_hook = False


def _thread_crash(args: threading.ExceptHookArgs) -> None:  # pragma: no cover
    report_crash(args.exc_type, args.exc_value, args.exc_traceback)


def install_global_exception_handlers() -> None:
    logging.raiseExceptions = False
    sys.excepthook = report_crash
    threading.excepthook = _thread_crash

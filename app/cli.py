# -*- coding: utf-8 -*-
"""Command-line flags mapped onto LaunchOptions."""
from __future__ import annotations

import argparse
from typing import Optional, Sequence, Tuple

from app.session import LaunchOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studio", description="MediaStudio launcher")
    parser.add_argument("--profile", default="", help="profile to activate for this session")
    parser.add_argument("--collection", default="", help="scene collection to activate for this session")
    parser.add_argument("--safe-mode", action="store_true",
                        help="load only core modules; skip modules that let external code change state")
    parser.add_argument("--disable-3rd-party-plugins", dest="disable_third_party", action="store_true",
                        help="load only modules shipped with the application")
    parser.add_argument("--portable", "-p", action="store_true",
                        help="keep configuration next to the application")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    parser.add_argument("--repair", action="store_true", help="reset the global configuration and exit")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> Tuple[LaunchOptions, argparse.Namespace]:
    # Qt adds its own switches to argv; leave them for QApplication
    ns, _unknown = build_parser().parse_known_args(argv)
    options = LaunchOptions(
        profile=ns.profile.strip(),
        collection=ns.collection.strip(),
        safe_mode=ns.safe_mode,
        disable_third_party=ns.disable_third_party,
        portable=ns.portable,
        verbose=ns.verbose,
    )
    return options, ns

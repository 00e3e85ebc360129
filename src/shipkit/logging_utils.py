from __future__ import annotations

import logging

from .config import env_or_config

_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def resolve_level(verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    name = str(env_or_config("LOG_LEVEL", "logging.level", "WARNING")).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: int = logging.WARNING) -> None:
    """Install a single stderr handler; console progress itself uses print()."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_shipkit", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    handler.setLevel(level)
    handler._shipkit = True  # type: ignore[attr-defined]

    root.setLevel(min(root.level or logging.WARNING, level))
    root.addHandler(handler)

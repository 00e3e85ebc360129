"""Layered settings lookup: environment variable, then JSON config file, then default.

The config file lives at ``$SHIPKIT_CONFIG`` or ``~/.config/shipkit/config.json``
and holds nested objects addressed with dotted keys, e.g.::

    {"bump": {"repeat_identifier": "reject"}, "launchgen": {"default_port": 5678}}
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

CONFIG_ENV_VAR = "SHIPKIT_CONFIG"
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "shipkit" / "config.json"

_TRUE_VALUES = {"1", "true", "yes", "on", "y"}
_FALSE_VALUES = {"0", "false", "no", "off", "n", ""}

_cache: dict[str, Any] | None = None


class ConfigError(ValueError):
    pass


def config_path() -> Path:
    raw = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if raw:
        return Path(raw).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config(path: Path | None = None) -> dict[str, Any]:
    target = path or config_path()
    if not target.exists():
        return {}
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Config file {target} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {target} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {target} must contain a JSON object.")
    return data


def _config() -> dict[str, Any]:
    global _cache
    if _cache is None:
        _cache = load_config()
    return _cache


def reload_config() -> None:
    global _cache
    _cache = None


def _lookup(data: dict[str, Any], dotted_key: str) -> Any:
    node: Any = data
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def env_or_config(
    env_key: str,
    config_key: str,
    default: Any = None,
    cast: Callable[[Any], Any] | None = None,
) -> Any:
    """Resolve a setting: env var wins, then the config file, then ``default``."""
    raw = os.environ.get(env_key)
    if raw is None or raw.strip() == "":
        raw = _lookup(_config(), config_key)
    if raw is None:
        return default
    if cast is None:
        return raw
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for '{config_key}' ({env_key}): {raw!r}") from exc


def resolve_root(raw: str | Path | None) -> Path:
    """Turn a CLI ``--root`` value into an absolute directory path."""
    if raw is None or str(raw).strip() == "":
        return Path.cwd().resolve()
    return Path(raw).expanduser().resolve()

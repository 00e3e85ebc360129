from __future__ import annotations

from functools import reduce
from typing import Iterable

from .models import Group, LaunchConfig

_SCALAR_FIELDS = ("schema_url", "port", "console", "runtime_executable", "excludes")


def overlay_group(base: Group, override: Group) -> Group:
    """Shallow field overlay: every field ``override`` defines replaces the base value."""
    return base.model_copy(update=override.model_dump(exclude_none=True))


def merge_groups(base: Iterable[Group], override: Iterable[Group]) -> list[Group]:
    # Keyed upsert on id. Updating an existing key keeps its position, new ids append.
    merged: dict[str, Group] = {}
    for group in base:
        merged[group.id] = overlay_group(merged[group.id], group) if group.id in merged else group
    for group in override:
        merged[group.id] = overlay_group(merged[group.id], group) if group.id in merged else group
    return list(merged.values())


def merge_configs(base: LaunchConfig, override: LaunchConfig) -> LaunchConfig:
    """Right-biased merge: scalars present on ``override`` win, groups upsert by id."""
    update = {
        field: getattr(override, field)
        for field in _SCALAR_FIELDS
        if getattr(override, field) is not None
    }
    if override.groups is not None:
        update["groups"] = merge_groups(base.groups or [], override.groups)
    return base.model_copy(update=update)


def merge_all(configs: Iterable[LaunchConfig]) -> LaunchConfig:
    """Fold ``configs`` left to right, most specific source last."""
    return reduce(merge_configs, configs, LaunchConfig())

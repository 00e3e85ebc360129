from __future__ import annotations

import sys
from pathlib import Path

from ..config import env_or_config
from ..manifest import Manifest, read_json, write_json
from .entrypoints import export_display_name, export_entries, is_executable_entry
from .merge import merge_configs
from .models import Console, Group, LaunchConfig

LAUNCH_CONFIG_FILE = "launch.config.json"

DEFAULT_PORT = 5678
DEFAULT_CONSOLE: Console = "internalConsole"
DEFAULT_EXCLUDES = (
    "**/.*",
    "**/.*/**",
    "**/__pycache__/**",
    "**/node_modules/**",
    "**/*.egg-info/**",
    "build/**",
    "dist/**",
)
TEST_INCLUDES = ("**/test_*.py", "**/*_test.py")
RUN_INCLUDES = ("**/run_*.py",)
TEST_MODULE = "pytest"
EXPORT_SCRIPTS = ("", "--help")


def default_port() -> int:
    return int(env_or_config("LAUNCHGEN_DEFAULT_PORT", "launchgen.default_port", DEFAULT_PORT, int))


def default_console() -> Console:
    value = str(env_or_config("LAUNCHGEN_DEFAULT_CONSOLE", "launchgen.default_console", DEFAULT_CONSOLE))
    if value not in ("internalConsole", "integratedTerminal", "externalTerminal"):
        return DEFAULT_CONSOLE
    return value  # type: ignore[return-value]


def read_config_file(path: Path) -> LaunchConfig:
    payload = read_json(path)
    launch = payload.get("launch") if isinstance(payload, dict) else None
    if launch is None:
        return LaunchConfig()
    return LaunchConfig.model_validate(launch)


class ConfigLoader:
    def __init__(self, *, force_regenerate: bool = False, dry_run: bool = False) -> None:
        self.force_regenerate = force_regenerate
        self.dry_run = dry_run

    def load_and_merge(self, directory: Path, *, is_project_root: bool = False) -> LaunchConfig:
        """Manifest ``launch`` property, then ``launch.config.json``, then an auto-generated default."""
        manifest = Manifest.load_optional(directory)
        config = LaunchConfig()
        has_launch_property = manifest is not None and manifest.data.get("launch") is not None
        if has_launch_property:
            config = LaunchConfig.model_validate(manifest.data["launch"])  # type: ignore[union-attr]

        config_file = directory / LAUNCH_CONFIG_FILE
        if config_file.is_file() and not self.force_regenerate:
            config = merge_configs(config, read_config_file(config_file))

        if self.force_regenerate or not (config_file.is_file() or has_launch_property):
            generated = self.generate(directory, manifest, is_project_root=is_project_root)
            if self.dry_run:
                print(f"[plan] Would write {config_file}", flush=True)
            else:
                write_json(config_file, {"launch": generated.to_json()})
                print(f"[ok] Generated {config_file}", flush=True)
            config = merge_configs(config, generated)
        return config

    def generate(self, directory: Path, manifest: Manifest | None, *, is_project_root: bool) -> LaunchConfig:
        console = default_console()
        groups = [
            Group(
                id="test",
                name="Tests",
                includes=list(TEST_INCLUDES),
                module=TEST_MODULE,
                console=console,
            ),
            Group(
                id="run",
                name="Runnable",
                includes=list(RUN_INCLUDES),
                console=console,
            ),
        ]
        groups.extend(self._export_groups(directory, manifest, console))
        if not is_project_root:
            return LaunchConfig(groups=groups)
        return LaunchConfig(
            port=default_port(),
            console=console,
            excludes=list(DEFAULT_EXCLUDES),
            runtime_executable=sys.executable,
            groups=groups,
        )

    @staticmethod
    def _export_groups(directory: Path, manifest: Manifest | None, console: Console) -> list[Group]:
        if manifest is None:
            return []
        groups: list[Group] = []
        for key, file_path in export_entries(manifest.data.get("exports")):
            if not is_executable_entry(directory / file_path):
                continue
            groups.append(
                Group(
                    id=key,
                    name=export_display_name(key, file_path),
                    program=file_path,
                    console=console,
                    scripts=list(EXPORT_SCRIPTS),
                )
            )
        return groups

"""Generate ``.vscode/launch.json`` debug entries for a Python project or monorepo.

Usage
-----
    # From anywhere inside a project whose root holds a .vscode folder
    python -m shipkit.launchgen

    # Explicit root, print the result instead of writing it
    python -m shipkit.launchgen --root ~/src/monorepo --dry-run

    # Rewrite every launch.config.json from defaults before generating
    python -m shipkit.launchgen --init
"""
from __future__ import annotations

import argparse
import json
import shlex
from pathlib import Path, PurePosixPath
from typing import Any, Sequence

from pydantic import ValidationError

from ..config import ConfigError, env_or_config, resolve_root, to_bool
from ..logging_utils import configure_logging, resolve_level
from ..manifest import Manifest, ManifestError, read_json, write_json
from .config_loader import DEFAULT_CONSOLE, ConfigLoader, default_port
from .file_finder import VSCODE_DIR, FileFinder, find_root, find_workspaces, relative_posix
from .merge import merge_configs
from .models import (
    WORKSPACE_FOLDER,
    Group,
    LaunchConfig,
    LaunchConfiguration,
    empty_launch_json,
    is_generated,
)

LAUNCH_JSON_FILE = "launch.json"


def _split_args(value: str | list[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item) for item in value]
    return shlex.split(value)


class LaunchGenerator:
    def __init__(
        self,
        project_root: Path,
        *,
        dry_run: bool = False,
        init: bool = False,
        loader: ConfigLoader | None = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.dry_run = dry_run
        self.loader = loader or ConfigLoader(force_regenerate=init, dry_run=dry_run)
        self.finder = FileFinder()

    @property
    def launch_file(self) -> Path:
        return self.project_root / VSCODE_DIR / LAUNCH_JSON_FILE

    def load_existing(self) -> dict[str, Any]:
        if not self.launch_file.is_file():
            return empty_launch_json()
        payload = read_json(self.launch_file)
        if not isinstance(payload, dict):
            raise ManifestError(f"{self.launch_file} must contain a JSON object.")
        if not isinstance(payload.get("configurations"), list):
            payload["configurations"] = []
        return payload

    def workspace_members(self) -> list[Path]:
        manifest = Manifest.load_optional(self.project_root)
        if manifest is None:
            return []
        return find_workspaces(self.project_root, manifest.workspace)

    def build(self) -> dict[str, Any]:
        existing = self.load_existing()
        manual = [entry for entry in existing["configurations"] if not is_generated(entry)]
        print(f"[info] Retaining {len(manual)} manual configuration(s)", flush=True)
        for entry in manual:
            print(f"  [skip] {entry.get('name', '<unnamed>')}", flush=True)

        configurations: list[dict[str, Any]] = list(manual)
        root_config = self.loader.load_and_merge(self.project_root, is_project_root=True)
        members = self.workspace_members()
        if members:
            for member in members:
                member_config = merge_configs(root_config, self.loader.load_and_merge(member))
                configurations.extend(self.generate_configurations(member, member_config))
        else:
            configurations.extend(self.generate_configurations(self.project_root, root_config))
        return {**existing, "configurations": configurations}

    def run(self) -> dict[str, Any]:
        launch = self.build()
        if self.dry_run:
            print(f"[dry-run] Would update {self.launch_file}", flush=True)
            print(json.dumps(launch, indent=2), flush=True)
            return launch
        write_json(self.launch_file, launch)
        print(f"[ok] Updated {self.launch_file}", flush=True)
        return launch

    def generate_configurations(self, directory: Path, config: LaunchConfig) -> list[dict[str, Any]]:
        is_root = directory == self.project_root
        member = None if is_root else directory.name
        prefix = "" if is_root else relative_posix(directory, self.project_root) + "/"
        entries: list[LaunchConfiguration] = []
        for group in config.groups or []:
            if group.includes:
                excludes = [*(config.excludes or []), *(group.excludes or [])]
                for rel_path in self.finder.find_files(directory, group.includes, excludes):
                    entries.append(self._file_entry(group, config, rel_path, prefix, member))
            elif group.program:
                for script in group.scripts or [""]:
                    entries.append(self._program_entry(group, config, script, prefix, member))
        print(f"[done] Generated {len(entries)} configuration(s) for {member or 'root'}", flush=True)
        return [entry.to_json() for entry in entries]

    def _common(self, group: Group, config: LaunchConfig, member: str | None) -> dict[str, Any]:
        port = group.port if group.port is not None else config.port
        return {
            "python": group.runtime_executable or config.runtime_executable,
            "python_args": list(group.runtime_args or []),
            "port": port if port is not None else default_port(),
            "console": group.console or config.console or DEFAULT_CONSOLE,
            "presentation": {"group": member} if member else None,
        }

    def _file_entry(
        self, group: Group, config: LaunchConfig, rel_path: str, prefix: str, member: str | None
    ) -> LaunchConfiguration:
        name = f"{member}: {rel_path}" if member else rel_path
        target = f"{WORKSPACE_FOLDER}/{prefix}{rel_path}"
        print(f"  [plan] {name}", flush=True)
        script_args = _split_args(group.script_args)
        if group.module:
            return LaunchConfiguration(
                name=name, module=group.module, args=[*script_args, target], **self._common(group, config, member)
            )
        return LaunchConfiguration(
            name=name, program=target, args=script_args or None, **self._common(group, config, member)
        )

    def _program_entry(
        self,
        group: Group,
        config: LaunchConfig,
        script: str | list[str],
        prefix: str,
        member: str | None,
    ) -> LaunchConfiguration:
        variant = _split_args(script)
        label = group.display_name + (f" {' '.join(variant)}" if variant else "")
        name = f"{member}: {label}" if member else label
        program = PurePosixPath(prefix + str(group.program).replace("\\", "/")).as_posix()
        print(f"  [plan] {name}", flush=True)
        return LaunchConfiguration(
            name=name,
            program=f"{WORKSPACE_FOLDER}/{program}",
            args=[*_split_args(group.script_args), *variant],
            **self._common(group, config, member),
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate .vscode/launch.json debug entries from launch.config.json groups.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--root", default=None, help="Project root (default: nearest directory with a .vscode folder).")
    parser.add_argument("--levels", type=int, default=2, help="Directories to check when searching for the root.")
    parser.add_argument("-n", "--dry-run", action="store_true", help="Print the result instead of writing it.")
    parser.add_argument("--init", action="store_true", help="Regenerate launch.config.json files from defaults.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(resolve_level(bool(args.verbose)))
    try:
        if args.root:
            project_root: Path | None = resolve_root(args.root)
        else:
            project_root = find_root(resolve_root(None), args.levels)
        if project_root is None:
            print(f"[error] Project root not found: the project folder must contain a {VSCODE_DIR} folder.", flush=True)
            return 1
        print(f"[start] launchgen root={project_root}", flush=True)
        dry_run = bool(args.dry_run) or bool(env_or_config("DRY_RUN", "runtime.dry_run", False, to_bool))
        LaunchGenerator(project_root, dry_run=dry_run, init=bool(args.init)).run()
    except ValidationError as exc:
        print(f"[error] Invalid launch configuration: {exc}", flush=True)
        return 1
    except (ManifestError, ConfigError, OSError) as exc:
        print(f"[error] {exc}", flush=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

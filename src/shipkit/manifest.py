from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

MANIFEST_FILE = "project.json"


class ManifestError(ValueError):
    pass


def read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise ManifestError(f"{path} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(f"{path} is not valid JSON: {exc}") from exc


def write_json(path: Path, content: Any) -> None:
    """Write ``content`` as indented JSON through a temp file so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    temp_path.write_text(json.dumps(content, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    temp_path.replace(path)


def workspace_patterns(data: dict[str, Any]) -> list[str]:
    raw = data.get("workspace")
    if raw is None:
        raw = data.get("workspaces")
    if not isinstance(raw, list):
        return []
    return [str(item).strip() for item in raw if str(item).strip()]


@dataclass
class Manifest:
    path: Path
    data: dict[str, Any]

    @classmethod
    def load(cls, directory: Path) -> Manifest:
        path = directory / MANIFEST_FILE
        if not path.is_file():
            raise FileNotFoundError(f"Manifest not found: {path}")
        data = read_json(path)
        if not isinstance(data, dict):
            raise ManifestError(f"{path} must contain a JSON object.")
        return cls(path=path, data=data)

    @classmethod
    def load_optional(cls, directory: Path) -> Manifest | None:
        if not (directory / MANIFEST_FILE).is_file():
            return None
        return cls.load(directory)

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str:
        return str(self.data.get("name") or self.directory.name)

    @property
    def version(self) -> str | None:
        value = self.data.get("version")
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    @property
    def workspace(self) -> list[str]:
        return workspace_patterns(self.data)

    @property
    def is_workspace_root(self) -> bool:
        return "workspace" in self.data or "workspaces" in self.data

    def set_version(self, version: str) -> None:
        self.data["version"] = version

    def save(self) -> None:
        write_json(self.path, self.data)


def is_workspace_root(directory: Path) -> bool:
    manifest = Manifest.load_optional(directory)
    return manifest is not None and bool(manifest.workspace)


def member_of_workspace(directory: Path, levels: int = 2) -> bool:
    """True when the parent or grandparent directory is a workspace root."""
    current = directory
    for _ in range(levels):
        parent = current.parent
        if parent == current:
            return False
        if is_workspace_root(parent):
            return True
        current = parent
    return False

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Any

ENTRY_FILE_NAMES = frozenset({"__main__.py", "main.py"})
REEXPORT_SUFFIX = "__init__.py"
MAIN_GUARD_RE = re.compile(r"""^if\s+__name__\s*==\s*["']__main__["']\s*:""", re.MULTILINE)


def export_entries(exports: Any) -> list[tuple[str, str]]:
    """Normalize the manifest ``exports`` field (string or mapping) into (key, path) pairs."""
    if isinstance(exports, str) and exports.strip():
        return [(".", exports.strip())]
    if isinstance(exports, dict):
        return [
            (str(key), str(value).strip())
            for key, value in exports.items()
            if isinstance(value, str) and value.strip()
        ]
    return []


def is_executable_entry(path: Path) -> bool:
    if path.name.endswith(REEXPORT_SUFFIX):
        return False
    if not path.is_file():
        return False
    if path.name in ENTRY_FILE_NAMES:
        return True
    text = path.read_text(encoding="utf-8", errors="replace")
    return text.startswith("#!") or MAIN_GUARD_RE.search(text) is not None


def export_display_name(key: str, file_path: str) -> str:
    if key != ".":
        return key
    posix = PurePosixPath(file_path.replace("\\", "/"))
    return str(posix.with_suffix("")) if posix.suffix == ".py" else str(posix)

"""Workspace traversal and glob selection.

Patterns are matched segment by segment against POSIX paths relative to the
directory being scanned. A ``**`` segment spans any number of whole
directories (zero included); every other segment is compared with
:func:`fnmatch.fnmatchcase` against a single path component, so ``*`` never
crosses a ``/``.
"""
from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from ..manifest import MANIFEST_FILE

VSCODE_DIR = ".vscode"

# Never descended into, whatever the configured excludes say.
ALWAYS_EXCLUDED_DIRS = frozenset(
    {".git", ".hg", ".svn", VSCODE_DIR, ".idea", ".venv", "venv", "__pycache__", "node_modules", ".tox", ".mypy_cache", ".pytest_cache"}
)


def _normalize(pattern: str) -> str:
    text = pattern.strip().replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    return text.rstrip("/") or "."


def _match_segments(parts: Sequence[str], pattern_parts: Sequence[str]) -> bool:
    if not pattern_parts:
        return not parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        return any(_match_segments(parts[index:], rest) for index in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)


def glob_match(rel_path: str, pattern: str) -> bool:
    path = rel_path.replace("\\", "/").strip("/")
    return _match_segments(path.split("/"), _normalize(pattern).split("/"))


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(glob_match(rel_path, pattern) for pattern in patterns)


def _walk(directory: Path, *, files: bool) -> Iterator[Path]:
    # Sorted so generated output is stable across runs and platforms.
    for current, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(name for name in dirnames if name not in ALWAYS_EXCLUDED_DIRS)
        base = Path(current)
        if files:
            for name in sorted(filenames):
                yield base / name
        else:
            for name in dirnames:
                yield base / name


def relative_posix(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


class FileFinder:
    def find_files(self, directory: Path, includes: Iterable[str], excludes: Iterable[str] = ()) -> list[str]:
        """Relative paths under ``directory`` matching an include and no exclude, sorted."""
        include_list = [p for p in includes if p.strip()]
        if not include_list:
            return []
        exclude_list = [p for p in excludes if p.strip()]
        selected: list[str] = []
        for path in _walk(directory, files=True):
            rel_path = relative_posix(path, directory)
            if not matches_any(rel_path, include_list):
                continue
            if matches_any(rel_path, exclude_list):
                continue
            selected.append(rel_path)
        return sorted(selected)


def find_workspaces(root: Path, patterns: Iterable[str]) -> list[Path]:
    """Member directories matching a workspace pattern and holding their own manifest."""
    pattern_list = [p for p in patterns if p.strip()]
    if not pattern_list:
        return []
    members: list[Path] = []
    for path in _walk(root, files=False):
        if path.name.startswith("."):
            continue
        rel_path = relative_posix(path, root)
        if matches_any(rel_path, pattern_list) and (path / MANIFEST_FILE).is_file():
            members.append(path)
    return sorted(members, key=lambda item: relative_posix(item, root))


def find_root(start: Path, levels: int = 2) -> Path | None:
    """Nearest of ``start`` and its ancestors (``levels`` directories checked) with a ``.vscode`` folder."""
    current = Path(start).resolve()
    for _ in range(max(1, levels)):
        if (current / VSCODE_DIR).is_dir():
            return current
        if current.parent == current:
            break
        current = current.parent
    return None

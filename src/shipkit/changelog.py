from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Sequence

from .manifest import ManifestError

CHANGELOG_FILE = "CHANGELOG.md"
PLACEHOLDER_ENTRY = "add details here"


def preamble(name: str) -> str:
    return (
        f"# Changelog for {name}\n\n"
        "All notable changes to this project will be documented in this file.\n\n"
    )


def build_section(version: str, messages: Sequence[str] = (), *, today: date | None = None) -> list[str]:
    stamp = (today or date.today()).isoformat()
    bullets = [f"- {msg}" for msg in messages if str(msg).strip()] or [f"- {PLACEHOLDER_ENTRY}"]
    return [f"## [{version}] - {stamp}", "", *bullets]


def splice_section(text: str, section: list[str]) -> str:
    """Insert ``section`` before the first ``## `` header, or append it when there is none."""
    lines = text.splitlines()
    for index, line in enumerate(lines):
        if line.startswith("## "):
            lines[index:index] = [*section, ""]
            return "\n".join(lines) + "\n"
    body = text.rstrip("\n")
    joined = "\n".join(section)
    return f"{body}\n\n{joined}\n" if body else f"{joined}\n"


def render_changelog(
    path: Path,
    *,
    name: str,
    version: str,
    messages: Sequence[str] = (),
    today: date | None = None,
) -> str:
    """Full changelog text with the new section in place; nothing is written."""
    section = build_section(version, messages, today=today)
    if not path.is_file():
        return preamble(name) + "\n".join(section) + "\n"
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ManifestError(f"{path} is not valid UTF-8: {exc}") from exc
    return splice_section(text, section)


def update_changelog(
    path: Path,
    *,
    name: str,
    version: str,
    messages: Sequence[str] = (),
    today: date | None = None,
) -> None:
    content = render_changelog(path, name=name, version=version, messages=messages, today=today)
    path.write_text(content, encoding="utf-8")

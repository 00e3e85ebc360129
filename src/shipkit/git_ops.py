from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

SHARED_FILES = frozenset(
    {
        "README.md",
        "project.json",
        ".gitignore",
        ".vscode/launch.json",
        "launch.config.json",
        "uv.lock",
        "poetry.lock",
        "requirements.lock",
    }
)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class GitError(RuntimeError):
    def __init__(self, args: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = ["git", *args]
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Git command failed: {' '.join(self.command)}\n{stderr.strip()}")


def _is_shared_file(rel_path: str) -> bool:
    return rel_path in SHARED_FILES or rel_path.endswith(".md") or rel_path.startswith("docs/")


def _porcelain_path(line: str) -> str:
    path = line[3:].strip() if len(line) > 3 else line.strip()
    if " -> " in path:
        path = path.split(" -> ", 1)[1]
    return path.strip('"')


class GitClient:
    def __init__(self, cwd: Path, *, runner: Runner | None = None) -> None:
        self.cwd = Path(cwd)
        self._runner = runner or subprocess.run

    def run(self, args: Sequence[str]) -> str:
        logger.info("Running git %s", " ".join(args))
        completed = self._runner(
            ["git", *args],
            cwd=str(self.cwd),
            capture_output=True,
            text=True,
            check=False,
        )
        if completed.returncode != 0:
            raise GitError(args, completed.returncode, completed.stderr or "")
        output = completed.stdout or ""
        if output.strip():
            logger.debug("%s", output.rstrip())
        return output

    def root_dir(self) -> Path | None:
        try:
            output = self.run(["rev-parse", "--show-toplevel"])
        except GitError:
            logger.warning("Not a git repository: %s", self.cwd)
            return None
        text = output.strip()
        return Path(text) if text else None

    def porcelain(self) -> list[str]:
        output = self.run(["status", "--porcelain"])
        return [line for line in output.splitlines() if line.strip()]

    def files_to_add(self) -> list[str]:
        """Paths to stage: the member directory plus shared files changed elsewhere in the repo."""
        files = ["."]
        root = self.root_dir()
        if root is None:
            return files
        member_dir = self.cwd.resolve()
        root = root.resolve()
        if member_dir == root:
            return files
        for line in self.porcelain():
            rel_path = _porcelain_path(line)
            if not rel_path:
                continue
            absolute = root / rel_path
            if absolute == member_dir or member_dir in absolute.parents:
                continue
            if _is_shared_file(rel_path):
                files.append(Path(os.path.relpath(absolute, member_dir)).as_posix())
        return files

    def add(self) -> list[str]:
        files = self.files_to_add()
        self.run(["add", *files])
        return files

    def commit(self, messages: Sequence[str]) -> None:
        args = ["commit"]
        for message in messages:
            args.extend(["-m", message])
        self.run(args)

    def tag(self, name: str, message: str | None = None) -> None:
        self.run(["tag", "-a", name, "-m", message or name])

    def push(self, with_tags: bool = False) -> None:
        self.run(["push"])
        if with_tags:
            self.run(["push", "--tags"])

"""Semantic-version bump for a ``project.json`` manifest.

Usage
-----
    # Bump patch (or the prerelease counter when on a prerelease)
    python -m shipkit.bump

    # Start a beta for the next minor, preview only
    python -m shipkit.bump --minor -i beta --dry-run

    # Finalize a prerelease, record it in CHANGELOG.md, commit, tag and push
    python -m shipkit.bump --release --changelog --tag "Fix parser crash"

    # Advance the prerelease identifier; "--" ends -i so the message is not read as its value
    python -m shipkit.bump -i --changelog -- "Fix parser crash"

    # Try the rules on an arbitrary version without touching any file
    python -m shipkit.bump --test 1.2.3-rc.4 -i
"""
from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .changelog import CHANGELOG_FILE, render_changelog
from .config import ConfigError, env_or_config, resolve_root, to_bool
from .git_ops import GitClient, GitError, Runner
from .logging_utils import configure_logging, resolve_level
from .manifest import Manifest, ManifestError, member_of_workspace
from .versioning import (
    IDENTIFIER_ORDER,
    BumpFailure,
    BumpOptions,
    BumpResult,
    ExhaustedIdentifierPolicy,
    RepeatIdentifierPolicy,
    increment,
    prerelease_request,
)


@dataclass(frozen=True)
class ReleaseOptions:
    dry_run: bool = False
    changelog: bool = False
    git: bool = False
    tag: bool = False
    messages: tuple[str, ...] = ()
    changelog_file: str = CHANGELOG_FILE


@dataclass
class BumpOutcome:
    result: BumpResult
    manifest_path: Path
    tag_name: str | None = None
    written: bool = False
    staged: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if self.result.ok or self.result.failure is BumpFailure.UNCHANGED_IDENTIFIER:
            return 0
        return 1


def tag_name_for(directory: Path, version: str) -> str:
    if member_of_workspace(directory):
        return f"{directory.name}-v{version}"
    return f"v{version}"


def _git_release(client: GitClient, version: str, tag_name: str, release: ReleaseOptions) -> list[str]:
    staged = client.add()
    messages = [msg for msg in release.messages if msg.strip()] or [f"Bump version to {version}"]
    client.commit(messages)
    if release.tag:
        client.tag(tag_name, release.messages[0] if release.messages else None)
    client.push(with_tags=release.tag)
    return staged


def run_bump(
    root: Path,
    options: BumpOptions,
    release: ReleaseOptions | None = None,
    *,
    runner: Runner | None = None,
) -> BumpOutcome:
    """Bump the manifest in ``root``; filesystem and git errors propagate to the caller."""
    rel = release or ReleaseOptions()
    manifest = Manifest.load(root)
    if manifest.is_workspace_root:
        raise ManifestError(f"{manifest.path} is a workspace root. There is no version to increment.")
    current = manifest.version
    if current is None:
        raise ManifestError(f"Version does not exist in {manifest.path}")

    result = increment(current, options)
    outcome = BumpOutcome(result=result, manifest_path=manifest.path)
    if not result.ok:
        tag = "warn" if result.failure is BumpFailure.UNCHANGED_IDENTIFIER else "error"
        print(f"[{tag}] {result.message}", flush=True)
        return outcome

    new_version = str(result.version)
    outcome.tag_name = tag_name_for(root, new_version)
    print(f"[info] Current version: {current}", flush=True)
    print(f"[info] New version: {new_version}", flush=True)
    use_git = rel.git or rel.tag
    if rel.tag:
        print(f"[info] Tag: {outcome.tag_name}", flush=True)

    if rel.dry_run:
        if rel.changelog:
            print(f"[plan] Update {rel.changelog_file} with [{new_version}]", flush=True)
        if use_git:
            print("[plan] Commit and push" + (f" tag {outcome.tag_name}" if rel.tag else ""), flush=True)
        print("[dry-run] No changes were made.", flush=True)
        return outcome

    # Nothing is written until every input file has been read.
    changelog_path = root / rel.changelog_file
    changelog_text: str | None = None
    if rel.changelog:
        changelog_text = render_changelog(
            changelog_path, name=manifest.name, version=new_version, messages=rel.messages
        )

    manifest.set_version(new_version)
    manifest.save()
    outcome.written = True
    print(f"[ok] Updated {manifest.path} with new version", flush=True)

    if changelog_text is not None:
        changelog_path.write_text(changelog_text, encoding="utf-8")
        print(f"[ok] Updated {changelog_path}", flush=True)

    if use_git:
        outcome.staged = _git_release(GitClient(root, runner=runner), new_version, outcome.tag_name, rel)
        print(f"[ok] Committed and pushed {new_version}", flush=True)
    return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bump the semantic version in project.json.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("messages", nargs="*", metavar="message", help="Commit and CHANGELOG.md message line(s).")
    parser.add_argument("--root", default=None, help="Project directory holding project.json (default: current directory).")
    parser.add_argument("--major", action="store_true", help="Bump the major version.")
    parser.add_argument("--minor", action="store_true", help="Bump the minor version.")
    parser.add_argument("--patch", action="store_true", help="Bump the patch version.")
    parser.add_argument(
        "-r",
        "--release",
        action="store_true",
        help="Remove the prerelease identifier, or bump patch when already stable.",
    )
    parser.add_argument(
        "-i",
        "--prerelease-identifier",
        nargs="?",
        const=True,
        default=None,
        choices=list(IDENTIFIER_ORDER),
        help=(
            "Set the prerelease identifier, or advance to the next one when no value is given. "
            "Put -- before messages that follow a bare -i."
        ),
    )
    parser.add_argument("-n", "--dry-run", action="store_true", help="Show the new version without writing.")
    parser.add_argument("-c", "--changelog", action="store_true", help="Add a section to CHANGELOG.md.")
    parser.add_argument("-g", "--git", action="store_true", help="Commit and push the change.")
    parser.add_argument("-t", "--tag", action="store_true", help="Create and push an annotated tag. Implies --git.")
    parser.add_argument("--test", metavar="VERSION", default=None, help="Bump VERSION instead of project.json and exit.")
    parser.add_argument(
        "--repeat-identifier",
        choices=[item.value for item in RepeatIdentifierPolicy],
        default=None,
        help="When -i names the current identifier: bump its counter, or reject as unchanged.",
    )
    parser.add_argument(
        "--exhausted-identifier",
        choices=[item.value for item in ExhaustedIdentifierPolicy],
        default=None,
        help="When -i advances past 'rc': finalize the release, or restart at alpha on the next patch.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def options_from_args(args: argparse.Namespace) -> BumpOptions:
    repeat = args.repeat_identifier or env_or_config(
        "BUMP_REPEAT_IDENTIFIER", "bump.repeat_identifier", RepeatIdentifierPolicy.BUMP_COUNTER.value
    )
    exhausted = args.exhausted_identifier or env_or_config(
        "BUMP_EXHAUSTED_IDENTIFIER", "bump.exhausted_identifier", ExhaustedIdentifierPolicy.FINALIZE.value
    )
    try:
        repeat_policy = RepeatIdentifierPolicy(str(repeat))
        exhausted_policy = ExhaustedIdentifierPolicy(str(exhausted))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    return BumpOptions(
        major=bool(args.major),
        minor=bool(args.minor),
        patch=bool(args.patch),
        release=bool(args.release),
        prerelease=prerelease_request(args.prerelease_identifier),
        repeat_policy=repeat_policy,
        exhausted_policy=exhausted_policy,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(resolve_level(bool(args.verbose)))
    try:
        options = options_from_args(args)
        if args.test:
            print(f"[info] Using version {args.test} from the command line.", flush=True)
            result = increment(args.test, options)
            if not result.ok:
                print(f"[error] {result.message}", flush=True)
                return 1
            print(f"[ok] {result.current} -> {result.version}", flush=True)
            return 0

        release = ReleaseOptions(
            dry_run=bool(args.dry_run) or bool(env_or_config("DRY_RUN", "runtime.dry_run", False, to_bool)),
            changelog=bool(args.changelog),
            git=bool(args.git),
            tag=bool(args.tag),
            messages=tuple(args.messages),
            changelog_file=str(env_or_config("BUMP_CHANGELOG_FILE", "bump.changelog_file", CHANGELOG_FILE)),
        )
        outcome = run_bump(resolve_root(args.root), options, release)
    except (FileNotFoundError, ManifestError, ConfigError, GitError, OSError) as exc:
        print(f"[error] {exc}", flush=True)
        return 1
    return outcome.exit_code


if __name__ == "__main__":
    raise SystemExit(main())

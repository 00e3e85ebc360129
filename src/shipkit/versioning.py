"""Semantic-version increment rules.

``increment`` is a pure decision function: given the current version string and
a :class:`BumpOptions` set it returns a :class:`BumpResult` holding either the
new version or a failure reason. It never raises on bad input and never touches
the filesystem; diagnostics go to the module logger.

Rule priority (first match wins): release, major, minor, patch, explicit or
advancing prerelease identifier, default.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

import semver

logger = logging.getLogger(__name__)

IDENTIFIER_ORDER: tuple[str, ...] = ("alpha", "beta", "rc")


class RepeatIdentifierPolicy(str, Enum):
    """What to do when the requested identifier equals the current one."""

    BUMP_COUNTER = "bump-counter"
    REJECT = "reject"


class ExhaustedIdentifierPolicy(str, Enum):
    """What advancing past the last identifier (``rc``) means."""

    FINALIZE = "finalize"
    RESTART_CYCLE = "restart-cycle"


class BumpFailure(str, Enum):
    INVALID_VERSION = "invalid-version"
    INVALID_IDENTIFIER = "invalid-identifier"
    UNCHANGED_IDENTIFIER = "unchanged-identifier"


@dataclass(frozen=True)
class NoIdentifier:
    pass


@dataclass(frozen=True)
class AdvanceNext:
    pass


@dataclass(frozen=True)
class SetIdentifier:
    name: str


PrereleaseRequest = Union[NoIdentifier, AdvanceNext, SetIdentifier]


def prerelease_request(value: str | bool | None) -> PrereleaseRequest:
    """Map the CLI option value of ``--prerelease-identifier`` onto a request variant."""
    if value is None or value is False:
        return NoIdentifier()
    if value is True:
        return AdvanceNext()
    text = str(value).strip()
    if not text:
        return AdvanceNext()
    return SetIdentifier(text)


@dataclass(frozen=True)
class BumpOptions:
    major: bool = False
    minor: bool = False
    patch: bool = False
    release: bool = False
    prerelease: PrereleaseRequest = NoIdentifier()
    repeat_policy: RepeatIdentifierPolicy = RepeatIdentifierPolicy.BUMP_COUNTER
    exhausted_policy: ExhaustedIdentifierPolicy = ExhaustedIdentifierPolicy.FINALIZE


@dataclass(frozen=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int
    prerelease_tag: str | None = None
    prerelease_number: int | None = None

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse ``text``; raises ValueError when it is not a semantic version."""
        parsed = semver.Version.parse(str(text).strip())
        tag: str | None = None
        number: int | None = None
        if parsed.prerelease:
            parts = parsed.prerelease.split(".")
            if len(parts) > 1 and parts[-1].isdigit():
                tag = ".".join(parts[:-1])
                number = int(parts[-1])
            else:
                tag = parsed.prerelease
        return cls(parsed.major, parsed.minor, parsed.patch, tag, number)

    def __str__(self) -> str:
        core = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease_tag is None:
            return core
        if self.prerelease_number is None:
            return f"{core}-{self.prerelease_tag}"
        return f"{core}-{self.prerelease_tag}.{self.prerelease_number}"

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease_tag is not None

    def stable(self) -> SemanticVersion:
        return replace(self, prerelease_tag=None, prerelease_number=None)

    def with_prerelease(self, tag: str | None) -> SemanticVersion:
        if tag is None:
            return self.stable()
        return replace(self, prerelease_tag=tag, prerelease_number=0)

    def next_major(self) -> SemanticVersion:
        return SemanticVersion(self.major + 1, 0, 0)

    def next_minor(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor + 1, 0)

    def next_patch(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor, self.patch + 1)

    def next_counter(self) -> SemanticVersion:
        if self.prerelease_number is None:
            return replace(self, prerelease_number=0)
        return replace(self, prerelease_number=self.prerelease_number + 1)


@dataclass(frozen=True)
class BumpResult:
    current: str
    version: str | None = None
    decision: str = ""
    failure: BumpFailure | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None and self.version is not None


def _identifier_index(name: str | None) -> int:
    if name is None or name not in IDENTIFIER_ORDER:
        return -1
    return IDENTIFIER_ORDER.index(name)


def _fail(current: str, failure: BumpFailure, message: str) -> BumpResult:
    return BumpResult(current=current, failure=failure, message=message)


def _requested_tag(request: PrereleaseRequest) -> str | None:
    if isinstance(request, SetIdentifier):
        return request.name
    if isinstance(request, AdvanceNext):
        return IDENTIFIER_ORDER[0]
    return None


def _set_identifier(
    current: SemanticVersion, name: str, policy: RepeatIdentifierPolicy
) -> tuple[SemanticVersion | None, str]:
    tag = current.prerelease_tag
    if name == tag:
        if policy is RepeatIdentifierPolicy.REJECT:
            return None, "unchanged"
        logger.warning("Identifier is already at %s; bumping prerelease counter", name)
        return current.next_counter(), "prerelease-counter"
    if _identifier_index(name) < _identifier_index(tag):
        return current.next_patch().with_prerelease(name), "identifier-lower"
    if tag is not None:
        return current.with_prerelease(name), "identifier-higher"
    return current.next_patch().with_prerelease(name), "identifier-start"


def _advance_identifier(
    current: SemanticVersion, policy: ExhaustedIdentifierPolicy
) -> tuple[SemanticVersion, str]:
    tag = current.prerelease_tag
    if tag is None:
        return current.next_patch().with_prerelease(IDENTIFIER_ORDER[0]), "identifier-start"
    index = _identifier_index(tag)
    if index < len(IDENTIFIER_ORDER) - 1:
        return current.with_prerelease(IDENTIFIER_ORDER[index + 1]), "identifier-advance"
    if policy is ExhaustedIdentifierPolicy.RESTART_CYCLE:
        return current.next_patch().with_prerelease(IDENTIFIER_ORDER[0]), "identifier-restart"
    return current.stable(), "identifier-finalize"


def increment(version: str, options: BumpOptions | None = None) -> BumpResult:
    opts = options or BumpOptions()
    try:
        current = SemanticVersion.parse(version)
    except (TypeError, ValueError):
        logger.error("Invalid version string: %s", version)
        return _fail(str(version), BumpFailure.INVALID_VERSION, f"Invalid version string: {version}")

    request = opts.prerelease
    if isinstance(request, SetIdentifier) and request.name not in IDENTIFIER_ORDER:
        logger.error("Invalid prerelease identifier: %s", request.name)
        return _fail(
            version,
            BumpFailure.INVALID_IDENTIFIER,
            f"Invalid prerelease identifier '{request.name}'. Must be one of: {', '.join(IDENTIFIER_ORDER)}.",
        )

    new: SemanticVersion | None
    if opts.release:
        if current.is_prerelease:
            new, decision = current.stable(), "release"
        else:
            logger.warning("Version %s is already stable; bumping patch level", version)
            new, decision = current.next_patch(), "release-stable"
    elif opts.major:
        new, decision = current.next_major().with_prerelease(_requested_tag(request)), "major"
    elif opts.minor:
        new, decision = current.next_minor().with_prerelease(_requested_tag(request)), "minor"
    elif opts.patch:
        new, decision = current.next_patch(), "patch"
    elif isinstance(request, SetIdentifier):
        new, decision = _set_identifier(current, request.name, opts.repeat_policy)
        if new is None:
            logger.warning("Identifier is already at %s; nothing to change", request.name)
            return _fail(
                version,
                BumpFailure.UNCHANGED_IDENTIFIER,
                f"Version {version} is already at prerelease identifier '{request.name}'.",
            )
    elif isinstance(request, AdvanceNext):
        new, decision = _advance_identifier(current, opts.exhausted_policy)
    elif current.is_prerelease:
        new, decision = current.next_counter(), "prerelease-counter"
    else:
        new, decision = current.next_patch(), "patch"

    logger.info("Current version: %s", version)
    logger.info("New version: %s", new)
    return BumpResult(current=version, version=str(new), decision=decision)

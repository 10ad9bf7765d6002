"""Semantic version handling for hook ``rev`` values.

Hook repositories are pinned by tag. The style guide requires tags that are
semantic versions (``v4.4.0``, ``23.3.0``) so upgrades are reviewable and
ordered. Branch names and bare commit SHAs are recognised separately so the
policy layer can report them with a precise rule.

Examples
--------
>>> from styleguard.precommit.revisions import parse_revision
>>> parse_revision("v0.0.261") < parse_revision("0.1.0")
True
>>> parse_revision("1.0.0-rc.1") < parse_revision("1.0.0")
True
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Final

from styleguard_common.errors import RevisionError

__all__ = [
    "FLOATING_REVISIONS",
    "RevisionError",
    "SemanticVersion",
    "is_semantic_version",
    "looks_like_commit",
    "parse_revision",
]

# semver.org 2.0.0 grammar with an optional "v" tag prefix.
_SEMVER_PATTERN: Final = re.compile(
    r"^(?P<prefix>[vV]?)"
    r"(?P<major>0|[1-9][0-9]*)\.(?P<minor>0|[1-9][0-9]*)\.(?P<patch>0|[1-9][0-9]*)"
    r"(?:-(?P<prerelease>(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
_COMMIT_PATTERN: Final = re.compile(r"^[0-9a-f]{7,40}$")

FLOATING_REVISIONS: Final[frozenset[str]] = frozenset(
    {"master", "main", "HEAD", "latest", "stable", "develop", "trunk"}
)


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    # Numeric identifiers sort numerically and before alphanumeric ones.
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


@total_ordering
@dataclass(frozen=True, slots=True)
class SemanticVersion:
    """Parsed semantic version.

    Equality and ordering follow SemVer precedence: ``prefix`` and ``build``
    are carried for display but ignored when comparing.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = field(default="", compare=False)
    prefix: str = field(default="", compare=False)

    def _precedence(self) -> tuple[object, ...]:
        # A release sorts after every prerelease of the same core version.
        pre_key: tuple[object, ...]
        if self.prerelease:
            pre_key = (0, tuple(_identifier_key(part) for part in self.prerelease))
        else:
            pre_key = (1, ())
        return (self.major, self.minor, self.patch, pre_key)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._precedence() < other._precedence()

    @property
    def is_prerelease(self) -> bool:
        """Return ``True`` for versions carrying a prerelease tag."""
        return bool(self.prerelease)

    def __str__(self) -> str:
        text = f"{self.prefix}{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def parse_revision(rev: str) -> SemanticVersion:
    """Parse ``rev`` as a semantic version, allowing a ``v`` prefix.

    Parameters
    ----------
    rev : str
        Revision as written in the hook configuration. Surrounding whitespace
        is ignored.

    Returns
    -------
    SemanticVersion
        Parsed version.

    Raises
    ------
    RevisionError
        If ``rev`` is not a semantic version.
    """
    match = _SEMVER_PATTERN.match(rev.strip())
    if match is None:
        message = f"Revision {rev!r} is not a semantic version"
        raise RevisionError(message, revision=rev)
    prerelease = match.group("prerelease")
    return SemanticVersion(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=match.group("build") or "",
        prefix=match.group("prefix"),
    )


def is_semantic_version(rev: str) -> bool:
    """Return ``True`` when ``rev`` parses as a semantic version."""
    return _SEMVER_PATTERN.match(rev.strip()) is not None


def looks_like_commit(rev: str) -> bool:
    """Return ``True`` for a lowercase hex commit SHA (7 to 40 characters)."""
    return _COMMIT_PATTERN.match(rev.strip()) is not None

"""Pydantic models mirroring the pre-commit configuration format.

The format itself belongs to pre-commit; these models only validate values
that claim to conform to it. Unknown keys are preserved because pre-commit
grows new options between releases and an older styleguard must not reject
them.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "SENTINEL_REPOS",
    "HookSpec",
    "PreCommitConfig",
    "RepoSpec",
    "normalize_repo_url",
]

SENTINEL_REPOS: Final[frozenset[str]] = frozenset({"local", "meta"})


def normalize_repo_url(url: str) -> str:
    """Return ``url`` in a form suitable for duplicate detection.

    Examples
    --------
    >>> normalize_repo_url("https://GitHub.com/psf/black.git/")
    'https://github.com/psf/black'
    """
    normalized = url.strip().lower().rstrip("/")
    return normalized.removesuffix(".git")


class HookSpec(BaseModel):
    """A single hook entry under a repository."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)
    name: str | None = None
    entry: str | None = None
    language: str | None = None
    files: str | None = None
    exclude: str | None = None
    types: list[str] | None = None
    additional_dependencies: list[str] | None = None
    pass_filenames: bool | None = None
    stages: list[str] | None = None
    line: int = Field(default=0, exclude=True)

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            message = "hook id must not be blank"
            raise ValueError(message)
        return stripped

    @field_validator("args", mode="before")
    @classmethod
    def _stringify_args(cls, value: object) -> object:
        # YAML turns `args: [--max-line-length, 120]` into a mixed list.
        if isinstance(value, list):
            return [str(item) for item in value]
        return value


class RepoSpec(BaseModel):
    """A repository entry: source URL, pinned revision and its hooks."""

    model_config = ConfigDict(extra="allow")

    repo: str = Field(min_length=1)
    rev: str | None = None
    hooks: list[HookSpec] = Field(min_length=1)
    line: int = Field(default=0, exclude=True)

    @field_validator("rev", mode="before")
    @classmethod
    def _coerce_rev(cls, value: object) -> object:
        # An unquoted `rev: 23.3` loads as a float. The loader passes the
        # scalar text instead, so this only applies to hand-built data.
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def is_sentinel(self) -> bool:
        """Return ``True`` for pre-commit's ``local`` and ``meta`` pseudo-repositories."""
        return self.repo in SENTINEL_REPOS


class PreCommitConfig(BaseModel):
    """Top-level ``.pre-commit-config.yaml`` document."""

    model_config = ConfigDict(extra="allow")

    repos: list[RepoSpec]
    default_language_version: dict[str, str] | None = None
    default_stages: list[str] | None = None
    files: str | None = None
    exclude: str | None = None
    fail_fast: bool | None = None
    minimum_pre_commit_version: str | None = None
    ci: dict[str, object] | None = None

    def iter_hooks(self) -> Iterator[tuple[RepoSpec, HookSpec]]:
        """Yield ``(repo, hook)`` pairs in file order."""
        for repo in self.repos:
            for hook in repo.hooks:
                yield repo, hook

    def hook_ids(self) -> list[str]:
        """Return hook ids in file order without duplicates."""
        seen: dict[str, None] = {}
        for _, hook in self.iter_hooks():
            seen.setdefault(hook.id, None)
        return list(seen)

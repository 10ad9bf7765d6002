"""Pre-commit configuration models, loading and revision parsing."""

from __future__ import annotations

from styleguard.precommit.loader import LoadedConfig, load_config, parse_config
from styleguard.precommit.models import (
    SENTINEL_REPOS,
    HookSpec,
    PreCommitConfig,
    RepoSpec,
    normalize_repo_url,
)
from styleguard.precommit.revisions import (
    FLOATING_REVISIONS,
    SemanticVersion,
    is_semantic_version,
    looks_like_commit,
    parse_revision,
)

__all__ = [
    "FLOATING_REVISIONS",
    "SENTINEL_REPOS",
    "HookSpec",
    "LoadedConfig",
    "PreCommitConfig",
    "RepoSpec",
    "SemanticVersion",
    "is_semantic_version",
    "load_config",
    "looks_like_commit",
    "normalize_repo_url",
    "parse_config",
    "parse_revision",
]

"""Typed settings for styleguard commands.

The functions in this module provide a thin wrapper around
``pydantic_settings.BaseSettings`` so every command loads strongly typed
configuration from ``STYLEGUARD_*`` environment variables. Validation errors
are surfaced as :class:`SettingsError` exceptions carrying the pydantic error
list, so the CLI can emit a structured envelope and exit with a config status.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from fnmatch import fnmatch
from pathlib import Path
from typing import Final, cast

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from styleguard.precommit.revisions import RevisionError, parse_revision
from styleguard_common.errors import SettingsError

__all__: Final[list[str]] = [
    "DEFAULT_REQUIRED_HOOKS",
    "DEFAULT_REQUIRED_SECTIONS",
    "StyleGuardSettings",
    "get_settings",
    "load_settings",
    "reset_settings_cache",
]

DEFAULT_REQUIRED_HOOKS: Final[tuple[str, ...]] = (
    "check-yaml",
    "debug-statements",
    "end-of-file-fixer",
    "trailing-whitespace",
    "ruff",
    "black",
    "autoflake",
)

DEFAULT_REQUIRED_SECTIONS: Final[tuple[str, ...]] = (
    "Virtual environment",
    "Linting and formatting",
    "Pre-commit hooks",
    "Pull requests",
)


def load_settings[SettingsT: BaseSettings](
    settings_factory: Callable[[], SettingsT] | type[SettingsT],
) -> SettingsT:
    """Instantiate settings via ``settings_factory`` with structured error handling.

    Parameters
    ----------
    settings_factory : Callable[[], SettingsT] | type[SettingsT]
        Zero-argument callable that returns a ``BaseSettings`` subclass.

    Returns
    -------
    SettingsT
        Validated settings instance.

    Raises
    ------
    SettingsError
        Raised when validation fails; the pydantic errors are attached.
    """
    try:
        return settings_factory()
    except ValidationError as exc:
        attr_name: object = getattr(settings_factory, "__name__", None)
        settings_name = (
            attr_name if isinstance(attr_name, str) else settings_factory.__class__.__name__
        )
        error_dicts = tuple(_as_error_dict(err) for err in exc.errors())
        message = f"Failed to load {settings_name} from STYLEGUARD_* environment"
        raise SettingsError(message, errors=error_dicts, cause=exc) from exc


def _as_error_dict(error: Mapping[str, object]) -> dict[str, object]:
    loc = error.get("loc", ())
    loc_parts = [str(part) for part in cast("tuple[object, ...]", loc)] if loc else []
    return {
        "loc": loc_parts,
        "msg": str(error.get("msg", "")),
        "type": str(error.get("type", "")),
    }


class StyleGuardSettings(BaseSettings):
    """Repository-wide configuration for styleguard checks."""

    model_config = SettingsConfigDict(
        env_prefix="STYLEGUARD_", case_sensitive=False, extra="ignore"
    )

    config_path: Path = Field(
        default=Path(".pre-commit-config.yaml"),
        description="Hook configuration checked by check-config and doctor.",
    )
    style_guide_path: Path = Field(
        default=Path("README.md"),
        description="Style guide document checked by check-docs.",
    )
    required_hooks: tuple[str, ...] = Field(
        default=DEFAULT_REQUIRED_HOOKS,
        description="Hook ids every configuration must enable.",
    )
    required_sections: tuple[str, ...] = Field(
        default=DEFAULT_REQUIRED_SECTIONS,
        description="Headings the style guide must contain (case-insensitive substring match).",
    )
    line_length: int = Field(default=120, gt=0)
    line_length_hooks: tuple[str, ...] = Field(
        default=("ruff", "black"),
        description="Hooks that must pass an explicit line length equal to line_length.",
    )
    allow_commit_revisions: bool = Field(
        default=False,
        description="Accept full or abbreviated commit SHAs as revisions.",
    )
    minimum_revisions: dict[str, str] = Field(
        default_factory=dict,
        description="Lowest acceptable semantic version keyed by hook repository URL.",
    )
    require_virtualenv: bool = True
    exec_allowlist: tuple[str, ...] = Field(
        default=("git", "pre-commit", "python*"),
        description="Glob patterns for executables the doctor command may run.",
    )
    git_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("minimum_revisions")
    @classmethod
    def _validate_minimum_revisions(cls, value: dict[str, str]) -> dict[str, str]:
        for repo, revision in value.items():
            try:
                parse_revision(revision)
            except RevisionError as exc:
                message = f"minimum revision for {repo!r} is not a semantic version: {revision!r}"
                raise ValueError(message) from exc
        return value

    @field_validator("required_hooks", "line_length_hooks", "required_sections")
    @classmethod
    def _strip_blank_entries(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(item.strip() for item in value if item.strip())

    def is_allowed(self, executable: Path) -> bool:
        """Return ``True`` when ``executable``'s basename matches the allow-list."""
        name = executable.name
        return any(fnmatch(name, pattern) for pattern in self.exec_allowlist)


_SETTINGS_CACHE: dict[str, StyleGuardSettings] = {}


def get_settings() -> StyleGuardSettings:
    """Return cached settings, loading them from the environment on first use."""
    cached = _SETTINGS_CACHE.get("settings")
    if cached is not None:
        return cached
    settings = load_settings(StyleGuardSettings)
    _SETTINGS_CACHE["settings"] = settings
    return settings


def reset_settings_cache() -> None:
    """Forget cached settings so the next :func:`get_settings` re-reads the environment."""
    _SETTINGS_CACHE.clear()

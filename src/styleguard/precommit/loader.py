"""Load and validate ``.pre-commit-config.yaml`` files.

The document is parsed twice: ``yaml.safe_load`` produces the data validated
by :class:`~styleguard.precommit.models.PreCommitConfig`, and ``yaml.compose``
produces the node tree used to attach source line numbers to every repository
and hook so violations can point at the offending line.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, cast

import yaml
from pydantic import ValidationError

from styleguard.precommit.models import PreCommitConfig
from styleguard_common.errors import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigurationError,
    ConfigValidationError,
)
from styleguard_common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "LoadedConfig",
    "load_config",
    "parse_config",
]

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LoadedConfig:
    """A validated configuration together with where it came from."""

    path: Path
    config: PreCommitConfig
    text: str


def load_config(path: Path | str) -> LoadedConfig:
    """Read ``path`` and return the validated configuration.

    Parameters
    ----------
    path : Path | str
        Location of the hook configuration file.

    Returns
    -------
    LoadedConfig
        Parsed configuration with line numbers attached.

    Raises
    ------
    ConfigNotFoundError
        If ``path`` does not exist or is not a file.
    ConfigParseError
        If the file is not UTF-8 or not valid YAML.
    ConfigValidationError
        If the document does not match the pre-commit configuration format.
    ConfigurationError
        If the file exists but cannot be read.
    """
    resolved = Path(path)
    if not resolved.is_file():
        message = f"Hook configuration not found: {resolved}"
        raise ConfigNotFoundError(message, path=str(resolved))
    try:
        text = resolved.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        message = f"Hook configuration is not UTF-8 text: {resolved}"
        raise ConfigParseError(
            message, cause=exc, context={"source": str(resolved), "offset": exc.start}
        ) from exc
    except OSError as exc:
        message = f"Hook configuration could not be read: {resolved}"
        raise ConfigurationError(message, cause=exc, context={"path": str(resolved)}) from exc
    LOGGER.debug(
        "Loaded hook configuration",
        extra={"operation": "load_config", "path": str(resolved), "bytes": len(text)},
    )
    return LoadedConfig(path=resolved, config=parse_config(text, source=str(resolved)), text=text)


def parse_config(text: str, *, source: str = "<string>") -> PreCommitConfig:
    """Validate YAML ``text`` as a pre-commit configuration.

    Raises
    ------
    ConfigParseError
        If ``text`` is not valid YAML.
    ConfigValidationError
        If the document shape is wrong.
    """
    try:
        data: object = yaml.safe_load(text)
        root = yaml.compose(text)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark
        context: dict[str, object] = {"source": source}
        if mark is not None:
            context["line"] = mark.line + 1
            context["column"] = mark.column + 1
        message = f"Invalid YAML in {source}: {exc.problem or exc}"
        raise ConfigParseError(message, cause=exc, context=context) from exc
    except yaml.YAMLError as exc:
        message = f"Invalid YAML in {source}: {exc}"
        raise ConfigParseError(message, cause=exc, context={"source": source}) from exc

    if not isinstance(data, dict):
        message = f"{source} must contain a mapping with a 'repos' list"
        raise ConfigValidationError(message, context={"source": source})

    annotated = _attach_lines(cast("dict[str, object]", data), root)
    try:
        return PreCommitConfig.model_validate(annotated)
    except ValidationError as exc:
        errors = [
            {
                "loc": ".".join(str(part) for part in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        message = f"{source} does not match the pre-commit configuration format"
        raise ConfigValidationError(
            message, cause=exc, context={"source": source, "errors": errors}
        ) from exc


def _mapping_value(node: yaml.Node | None, key: str) -> yaml.Node | None:
    if not isinstance(node, yaml.MappingNode):
        return None
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
            return cast("yaml.Node", value_node)
    return None


def _sequence_items(node: yaml.Node | None) -> list[yaml.Node]:
    if isinstance(node, yaml.SequenceNode):
        return list(node.value)
    return []


def _attach_lines(data: dict[str, object], root: yaml.Node | None) -> dict[str, object]:
    """Return a copy of ``data`` with 1-based ``line`` keys on repos and hooks."""
    repos = data.get("repos")
    if not isinstance(repos, list):
        return data
    repo_nodes = _sequence_items(_mapping_value(root, "repos"))
    annotated_repos: list[object] = []
    for index, repo in enumerate(repos):
        if not isinstance(repo, dict) or index >= len(repo_nodes):
            annotated_repos.append(repo)
            continue
        repo_node = repo_nodes[index]
        repo_copy: dict[str, object] = dict(cast("Mapping[str, object]", repo))
        repo_copy["line"] = repo_node.start_mark.line + 1
        rev_node = _mapping_value(repo_node, "rev")
        if isinstance(rev_node, yaml.ScalarNode) and isinstance(repo_copy.get("rev"), int | float):
            # `rev: 1.10` loads as 1.1; keep the text as written.
            repo_copy["rev"] = rev_node.value
        hooks = repo_copy.get("hooks")
        hook_nodes = _sequence_items(_mapping_value(repo_node, "hooks"))
        if isinstance(hooks, list):
            annotated_hooks: list[object] = []
            for hook_index, hook in enumerate(hooks):
                if isinstance(hook, dict) and hook_index < len(hook_nodes):
                    hook_copy: dict[str, object] = dict(cast("Mapping[str, object]", hook))
                    hook_copy["line"] = hook_nodes[hook_index].start_mark.line + 1
                    annotated_hooks.append(hook_copy)
                else:
                    annotated_hooks.append(hook)
            repo_copy["hooks"] = annotated_hooks
        annotated_repos.append(repo_copy)
    return {**data, "repos": annotated_repos}

"""Decide which preprocessors run on a book, and in what order."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

__all__ = [
    "PipelineError",
    "StepSpec",
    "DEFAULT_PREPROCESSORS",
    "LINKS",
    "INDEX",
    "determine_preprocessors",
    "custom_preprocessor_command",
    "is_default_preprocessor",
    "preprocessor_should_run",
]

log = logging.getLogger(__name__)

LINKS = "links"
INDEX = "index"
DEFAULT_PREPROCESSORS = (LINKS, INDEX)
COMMAND_PREFIX = "mdbook-"


class PipelineError(ValueError):
    """Raised when the preprocessor configuration is invalid."""


@dataclass(frozen=True)
class StepSpec:
    """A preprocessor to run: a built-in one, or an external command."""

    name: str
    command: str | None = None

    @property
    def is_builtin(self) -> bool:
        """Whether this step is one of the built-in preprocessors."""
        return self.command is None


def _lookup(config: Mapping[str, Any], key: str) -> Any:
    value: Any = config
    for part in key.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


def _use_default_preprocessors(config: Mapping[str, Any]) -> bool:
    value = _lookup(config, "build.use-default-preprocessors")
    return True if value is None else bool(value)


def is_default_preprocessor(name: str) -> bool:
    """Whether ``name`` is one of the built-in default preprocessors."""
    return name in DEFAULT_PREPROCESSORS


def custom_preprocessor_command(name: str, table: Any) -> str:
    """Return the command configured for preprocessor ``name``."""
    if isinstance(table, Mapping):
        command = table.get("command")
        if isinstance(command, str):
            return command
    return f"{COMMAND_PREFIX}{name}"


def _string_list(table: Mapping[str, Any], name: str, key: str) -> list[str]:
    values = table.get(key)
    if values is None:
        return []
    if not isinstance(values, list):
        raise PipelineError(f"Expected preprocessor.{name}.{key} to be an array")
    if not all(isinstance(value, str) for value in values):
        raise PipelineError(f"Expected preprocessor.{name}.{key} to contain strings")
    return values


def determine_preprocessors(config: Mapping[str, Any]) -> list[StepSpec]:
    """Return the preprocessors to run, ordered by their declared dependencies.

    Ties are broken by code-point order of the names.
    """
    use_defaults = _use_default_preprocessors(config)
    names: dict[str, None] = {}
    # Maps a name to the names that must run before it.
    predecessors: dict[str, set[str]] = {}

    def add(name: str) -> None:
        names.setdefault(name, None)
        predecessors.setdefault(name, set())

    def add_dependency(first: str, then: str) -> None:
        add(first)
        add(then)
        predecessors[then].add(first)

    if use_defaults:
        for name in DEFAULT_PREPROCESSORS:
            add(name)

    table = _lookup(config, "preprocessor")
    if not isinstance(table, Mapping):
        table = {}

    def exists(name: str) -> bool:
        return (use_defaults and name in DEFAULT_PREPROCESSORS) or name in table

    for name, entry in table.items():
        add(name)
        if not isinstance(entry, Mapping):
            continue

        for after in _string_list(entry, name, "before"):
            if exists(after):
                add_dependency(name, after)
            else:
                log.warning(
                    'preprocessor.%s.after contains "%s", which was not found',
                    name,
                    after,
                )

        for before in _string_list(entry, name, "after"):
            if exists(before):
                add_dependency(before, name)
            else:
                log.warning(
                    'preprocessor.%s.before contains "%s", which was not found',
                    name,
                    before,
                )

    ordered: list[StepSpec] = []
    remaining = dict(predecessors)
    while ready := sorted(name for name, deps in remaining.items() if not deps):
        for name in ready:
            del remaining[name]
        for deps in remaining.values():
            deps.difference_update(ready)
        for name in ready:
            if name in DEFAULT_PREPROCESSORS:
                ordered.append(StepSpec(name))
            else:
                ordered.append(
                    StepSpec(name, custom_preprocessor_command(name, table[name]))
                )

    if remaining:
        raise PipelineError("Cyclic dependency detected in preprocessors")
    return ordered


def preprocessor_should_run(
    name: str,
    supports_renderer: Callable[[str], bool],
    renderer_name: str,
    config: Mapping[str, Any],
) -> bool:
    """Whether preprocessor ``name`` should run for ``renderer_name``.

    Default preprocessors follow their own ``supports_renderer`` answer when
    defaults are enabled; otherwise an explicit ``renderers`` list in the
    configuration wins, and ``supports_renderer`` is the fallback.
    """
    if _use_default_preprocessors(config) and is_default_preprocessor(name):
        return bool(supports_renderer(renderer_name))

    explicit = _lookup(config, f"preprocessor.{name}.renderers")
    if isinstance(explicit, list):
        return any(
            isinstance(value, str) and value == renderer_name for value in explicit
        )

    return bool(supports_renderer(renderer_name))
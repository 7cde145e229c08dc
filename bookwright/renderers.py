"""Decide which renderers build a book, and where their output goes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = [
    "RendererSpec",
    "BUILTIN_RENDERERS",
    "DEFAULT_BUILD_DIR",
    "determine_renderers",
    "custom_renderer_command",
    "build_dir_for",
]

HTML = "html"
MARKDOWN = "markdown"
BUILTIN_RENDERERS = (HTML, MARKDOWN)
DEFAULT_BUILD_DIR = "book"
COMMAND_PREFIX = "mdbook-"


@dataclass(frozen=True)
class RendererSpec:
    """A renderer to run: a built-in one, or an external command."""

    name: str
    command: str | None = None

    @property
    def is_builtin(self) -> bool:
        """Whether this renderer is one of the built-in renderers."""
        return self.command is None


def _lookup(config: Mapping[str, Any], key: str) -> Any:
    value: Any = config
    for part in key.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


def custom_renderer_command(name: str, table: Any) -> str:
    """Return the command for renderer ``name``, defaulting to ``mdbook-<name>``."""
    if isinstance(table, Mapping):
        command = table.get("command")
        if isinstance(command, str):
            return command
    return f"{COMMAND_PREFIX}{name}"


def determine_renderers(config: Mapping[str, Any]) -> list[RendererSpec]:
    """Return the renderers named in the ``output`` table, ordered by name.

    When no renderer is configured the HTML renderer is used.
    """
    renderers: list[RendererSpec] = []
    output = _lookup(config, "output")
    if isinstance(output, Mapping):
        for name in sorted(output):
            if name in BUILTIN_RENDERERS:
                renderers.append(RendererSpec(name))
            else:
                renderers.append(
                    RendererSpec(name, custom_renderer_command(name, output[name]))
                )
    if not renderers:
        renderers.append(RendererSpec(HTML))
    return renderers


def build_dir_for(
    root: Path | str,
    config: Mapping[str, Any],
    renderer_count: int,
    backend_name: str,
) -> Path:
    """Return where ``backend_name`` puts its output.

    With a single renderer that is the build directory itself; with several,
    each renderer gets its own sub-directory of it.
    """
    build_dir = _lookup(config, "build.build-dir")
    if not isinstance(build_dir, str):
        build_dir = DEFAULT_BUILD_DIR
    path = Path(root) / build_dir
    if renderer_count <= 1:
        return path
    return path / backend_name
"""A preprocessor that leaves the book exactly as it was."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any

import semver

from .book import Book, BookError

__all__ = [
    "SUPPORTED_VERSION",
    "PreprocessorContext",
    "NopPreprocessor",
    "parse_input",
    "check_version",
    "main",
]

SUPPORTED_VERSION = "0.4.21"


@dataclass
class PreprocessorContext:
    """What a preprocessor is told about the book it is run on."""

    root: Path
    config: dict[str, Any] = field(default_factory=dict)
    renderer: str = ""
    mdbook_version: str = ""

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    def preprocessor_table(self, name: str) -> Mapping[str, Any] | None:
        """Return the ``preprocessor.<name>`` table, if configured."""
        table = self.config.get("preprocessor")
        if not isinstance(table, Mapping):
            return None
        entry = table.get(name)
        return entry if isinstance(entry, Mapping) else None


class NopPreprocessor:
    """A preprocessor that does nothing."""

    name = "nop-preprocessor"

    def run(self, ctx: PreprocessorContext, book: Book) -> Book:
        """Return ``book`` unchanged, or fail when asked to via ``blow-up``."""
        table = ctx.preprocessor_table(self.name)
        if table is not None and "blow-up" in table:
            raise RuntimeError("Boom!!1!")
        return book

    def supports_renderer(self, renderer: str) -> bool:
        """Every renderer except ``not-supported`` is supported."""
        return renderer != "not-supported"


def parse_input(stream: IO[str] | IO[bytes]) -> tuple[PreprocessorContext, Book]:
    """Read the ``[context, book]`` JSON pair a preprocessor receives."""
    try:
        data = json.loads(stream.read())
    except ValueError as exc:
        raise ValueError(f"Unable to parse the input: {exc}") from exc
    if not isinstance(data, list) or len(data) != 2:
        raise ValueError("Expected the input to be a [context, book] pair")
    raw_ctx, raw_book = data
    if not isinstance(raw_ctx, Mapping):
        raise ValueError("Expected the preprocessor context to be an object")
    try:
        config = raw_ctx["config"]
        if not isinstance(config, dict):
            raise ValueError("Expected the context's config to be an object")
        ctx = PreprocessorContext(
            root=Path(str(raw_ctx["root"])),
            config=config,
            renderer=str(raw_ctx["renderer"]),
            mdbook_version=str(raw_ctx["mdbook_version"]),
        )
    except KeyError as exc:
        raise ValueError(f"Context is missing the field {exc.args[0]!r}") from exc
    return ctx, Book.from_json(raw_book)


def _compatible(version: semver.Version, required: semver.Version) -> bool:
    if version < required:
        return False
    if required.major > 0:
        return version.major == required.major
    if required.minor > 0:
        return version.major == 0 and version.minor == required.minor
    return (version.major, version.minor, version.patch) == (
        0,
        0,
        required.patch,
    )


def check_version(ctx: PreprocessorContext, name: str) -> bool:
    """Warn on stderr when the calling version is not compatible.

    Returns whether the versions are compatible; raises ``ValueError`` when
    the calling version cannot be parsed.
    """
    version = semver.Version.parse(ctx.mdbook_version)
    required = semver.Version.parse(SUPPORTED_VERSION)
    if _compatible(version, required):
        return True
    print(
        f"Warning: The {name} plugin was built against version "
        f"{SUPPORTED_VERSION} of mdbook, but we're being called from version "
        f"{ctx.mdbook_version}",
        file=sys.stderr,
    )
    return False


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nop-preprocessor",
        description="A mdbook preprocessor which does precisely nothing",
    )
    commands = parser.add_subparsers(dest="command")
    supports = commands.add_parser(
        "supports",
        help="Check whether a renderer is supported by this preprocessor",
    )
    supports.add_argument("renderer")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the preprocessor; returns the process exit status."""
    args = _make_parser().parse_args(argv)
    preprocessor = NopPreprocessor()

    if args.command == "supports":
        return 0 if preprocessor.supports_renderer(args.renderer) else 1

    try:
        ctx, book = parse_input(sys.stdin)
        check_version(ctx, preprocessor.name)
        processed = preprocessor.run(ctx, book)
    except (ValueError, BookError, RuntimeError) as exc:
        print(exc, file=sys.stderr)
        return 1
    json.dump(processed.to_json(), sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
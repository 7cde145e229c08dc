"""Load a book's chapters from disk into an in-memory tree."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .sections import SectionNumber
from .summary import Link, PartTitle, Separator, Summary, SummaryItem
from .summary_parser import SummaryParseError, parse_summary

__all__ = [
    "BookError",
    "Chapter",
    "Book",
    "BookItem",
    "load_book",
    "create_missing_chapters",
    "load_book_from_disk",
    "load_summary_item",
    "load_chapter",
]

log = logging.getLogger(__name__)

_UTF8_BOM = "\ufeff"


class BookError(Exception):
    """Raised when a book cannot be loaded, created or decoded."""


def _as_path(value: Path | str | None) -> Path | None:
    if value is None or isinstance(value, Path):
        return value
    return Path(value)


@dataclass
class Chapter:
    """A chapter, usually backed by one file on disk, possibly with sub-items.

    ``path`` and ``source_path`` are relative to the ``SUMMARY.md`` file;
    a chapter without a ``path`` is a draft.
    """

    name: str
    content: str = ""
    number: SectionNumber | None = None
    sub_items: list[BookItem] = field(default_factory=list)
    path: Path | None = None
    source_path: Path | None = None
    parent_names: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.path = _as_path(self.path)
        self.source_path = _as_path(self.source_path)
        if self.number is not None and not isinstance(self.number, SectionNumber):
            self.number = SectionNumber(self.number)

    @classmethod
    def draft(cls, name: str, parent_names: list[str] | None = None) -> Chapter:
        """Create a chapter that has no source file and hence no content."""
        return cls(name=name, parent_names=list(parent_names or []))

    def is_draft(self) -> bool:
        """Whether the chapter has no path to a source Markdown file."""
        return self.path is None

    def __str__(self) -> str:
        if self.number is not None:
            return f"{self.number} {self.name}"
        return self.name


BookItem = Chapter | Separator | PartTitle


@dataclass
class Book:
    """A tree of chapters, separators and part titles."""

    sections: list[BookItem] = field(default_factory=list)

    def __iter__(self) -> Iterator[BookItem]:
        """Yield every item of the book, depth first."""
        stack = list(reversed(self.sections))
        while stack:
            item = stack.pop()
            yield item
            if isinstance(item, Chapter):
                stack.extend(reversed(item.sub_items))

    def for_each(self, func: Callable[[BookItem], Any]) -> None:
        """Apply ``func`` to every item, visiting a chapter's sub-items first."""
        _for_each(func, self.sections)

    def push_item(self, item: BookItem) -> Book:
        """Append ``item`` to the top level of the book."""
        self.sections.append(item)
        return self

    def to_json(self) -> dict[str, Any]:
        """Return the JSON-compatible representation of the book."""
        return {
            "sections": [_item_to_json(item) for item in self.sections],
            "__non_exhaustive": None,
        }

    @classmethod
    def from_json(cls, data: str | bytes | Mapping[str, Any]) -> Book:
        """Build a book from its JSON text or decoded representation."""
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except ValueError as exc:
                raise BookError(f"Invalid book JSON: {exc}") from exc
        if not isinstance(data, Mapping):
            raise BookError(f"Expected a JSON object for a book, got {data!r}")
        sections = data.get("sections")
        if not isinstance(sections, list):
            raise BookError("Expected the book's sections to be a list")
        return cls([_item_from_json(item) for item in sections])


def _for_each(func: Callable[[BookItem], Any], items: list[BookItem]) -> None:
    for item in items:
        if isinstance(item, Chapter):
            _for_each(func, item.sub_items)
        func(item)


def _path_to_json(path: Path | None) -> str | None:
    return None if path is None else str(path)


def _item_to_json(item: BookItem) -> Any:
    match item:
        case Chapter():
            return {
                "Chapter": {
                    "name": item.name,
                    "content": item.content,
                    "number": None if item.number is None else list(item.number),
                    "sub_items": [_item_to_json(sub) for sub in item.sub_items],
                    "path": _path_to_json(item.path),
                    "source_path": _path_to_json(item.source_path),
                    "parent_names": list(item.parent_names),
                }
            }
        case Separator():
            return "Separator"
        case PartTitle(title=title):
            return {"PartTitle": title}
    raise BookError(f"Not a book item: {item!r}")


def _item_from_json(data: Any) -> BookItem:
    match data:
        case "Separator":
            return Separator()
        case {"Chapter": dict() as chapter}:
            return _chapter_from_json(chapter)
        case {"PartTitle": str() as title}:
            return PartTitle(title)
    raise BookError(f"Unrecognised book item: {data!r}")


def _chapter_from_json(data: Mapping[str, Any]) -> Chapter:
    try:
        number = data["number"]
        sub_items = data["sub_items"]
        if not isinstance(sub_items, list):
            raise BookError("Expected a chapter's sub_items to be a list")
        return Chapter(
            name=str(data["name"]),
            content=str(data["content"]),
            number=None if number is None else SectionNumber(number),
            sub_items=[_item_from_json(item) for item in sub_items],
            path=data["path"],
            source_path=data["source_path"],
            parent_names=[str(name) for name in data["parent_names"]],
        )
    except KeyError as exc:
        raise BookError(f"Chapter is missing the field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise BookError(f"Invalid chapter data: {exc}") from exc


def _escape_title(name: str) -> str:
    return name.replace("<", "&lt;").replace(">", "&gt;")


def load_book(src_dir: Path | str, create_missing: bool) -> Book:
    """Load a book from its source directory, guided by its ``SUMMARY.md``."""
    src_dir = Path(src_dir)
    summary_md = src_dir / "SUMMARY.md"
    try:
        summary_text = summary_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BookError(
            f"Couldn't open SUMMARY.md in {str(src_dir)!r} directory: {exc}"
        ) from exc

    try:
        summary = parse_summary(summary_text)
    except SummaryParseError as exc:
        raise BookError(
            f"Summary parsing failed for file={str(summary_md)!r}: {exc}"
        ) from exc

    if create_missing:
        try:
            create_missing_chapters(src_dir, summary)
        except BookError as exc:
            raise BookError(f"Unable to create missing chapters: {exc}") from exc

    return load_book_from_disk(summary, src_dir)


def create_missing_chapters(src_dir: Path | str, summary: Summary) -> None:
    """Create a stub file for every linked chapter whose file does not exist."""
    src_dir = Path(src_dir)
    pending: list[SummaryItem] = [
        *summary.prefix_chapters,
        *summary.numbered_chapters,
        *summary.suffix_chapters,
    ]
    while pending:
        item = pending.pop()
        if not isinstance(item, Link):
            continue
        if item.location is not None:
            filename = src_dir / item.location
            if not filename.exists():
                log.debug("Creating missing file %s", filename)
                try:
                    filename.parent.mkdir(parents=True, exist_ok=True)
                    with open(filename, "w", encoding="utf-8", newline="") as handle:
                        handle.write(f"# {_escape_title(item.name)}\n")
                except OSError as exc:
                    raise BookError(
                        f"Unable to create missing file: {filename}: {exc}"
                    ) from exc
        pending.extend(item.nested_items)


def load_book_from_disk(summary: Summary, src_dir: Path | str) -> Book:
    """Load every chapter named by ``summary`` from ``src_dir``."""
    log.debug("Loading the book from disk")
    items = [
        *summary.prefix_chapters,
        *summary.numbered_chapters,
        *summary.suffix_chapters,
    ]
    return Book([load_summary_item(item, src_dir, []) for item in items])


def load_summary_item(
    item: SummaryItem, src_dir: Path | str, parent_names: list[str]
) -> BookItem:
    """Turn one summary item into a book item, loading chapters from disk."""
    match item:
        case Separator():
            return Separator()
        case Link():
            return load_chapter(item, src_dir, parent_names)
        case PartTitle(title=title):
            return PartTitle(title)
    raise TypeError(f"Not a summary item: {item!r}")


def load_chapter(link: Link, src_dir: Path | str, parent_names: list[str]) -> Chapter:
    """Load the chapter ``link`` points at, together with its nested items."""
    src_dir = Path(src_dir)
    if link.location is not None:
        log.debug("Loading %s (%s)", link.name, link.location)
        location = (
            link.location if link.location.is_absolute() else src_dir / link.location
        )
        try:
            with open(location, encoding="utf-8", newline="") as handle:
                content = handle.read()
        except UnicodeDecodeError as exc:
            raise BookError(
                f'Unable to read "{link.name}" ({location}): {exc}'
            ) from exc
        except OSError as exc:
            raise BookError(f"Chapter file not found, {link.location}: {exc}") from exc

        content = content.removeprefix(_UTF8_BOM)
        try:
            stripped = location.relative_to(src_dir)
        except ValueError as exc:
            raise BookError(
                f"Chapter {location} is not inside the book's source directory"
            ) from exc
        chapter = Chapter(
            name=link.name,
            content=content,
            path=stripped,
            source_path=stripped,
            parent_names=list(parent_names),
        )
    else:
        chapter = Chapter.draft(link.name, parent_names)

    chapter.number = link.number
    sub_parents = [*parent_names, link.name]
    chapter.sub_items = [
        load_summary_item(item, src_dir, sub_parents) for item in link.nested_items
    ]
    return chapter
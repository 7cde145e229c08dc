"""The parsed structure of a ``SUMMARY.md`` file."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .sections import SectionNumber

__all__ = ["Link", "Separator", "PartTitle", "Summary", "SummaryItem"]


@dataclass
class Link:
    """An entry such as ``[Some section](./path/to/file.md)``.

    ``location`` is relative to the book's source directory; ``None``
    marks a draft chapter that has no file yet.  ``number`` is set only
    for chapters in the numbered section.
    """

    name: str
    location: Path | None = None
    number: SectionNumber | None = None
    nested_items: list[SummaryItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.location is not None and not isinstance(self.location, Path):
            self.location = Path(self.location)
        if self.number is not None and not isinstance(self.number, SectionNumber):
            self.number = SectionNumber(self.number)

    def all_items(self) -> Iterator[SummaryItem]:
        """Yield every item nested below this link, depth first."""
        for item in self.nested_items:
            yield item
            if isinstance(item, Link):
                yield from item.all_items()


@dataclass(frozen=True)
class Separator:
    """A separator line (``---``)."""


@dataclass(frozen=True)
class PartTitle:
    """The title of a part of the numbered chapters."""

    title: str


SummaryItem = Link | Separator | PartTitle


@dataclass
class Summary:
    """How the book is laid out: an optional title and three runs of items."""

    title: str | None = None
    prefix_chapters: list[SummaryItem] = field(default_factory=list)
    numbered_chapters: list[SummaryItem] = field(default_factory=list)
    suffix_chapters: list[SummaryItem] = field(default_factory=list)

    def all_items(self) -> Iterator[SummaryItem]:
        """Yield every item of the summary, nested ones included, depth first."""
        for section in (
            self.prefix_chapters,
            self.numbered_chapters,
            self.suffix_chapters,
        ):
            for item in section:
                yield item
                if isinstance(item, Link):
                    yield from item.all_items()
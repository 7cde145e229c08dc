"""A recursive descent parser for ``SUMMARY.md``.

The grammar is roughly::

    summary           ::= title prefix_chapters numbered_chapters suffix_chapters
    title             ::= "# " TEXT | EPSILON
    prefix_chapters   ::= item*
    suffix_chapters   ::= item*
    numbered_chapters ::= part+
    part              ::= title dotted_item+
    dotted_item       ::= INDENT* DOT_POINT item
    item              ::= link | separator
    separator         ::= "---"
    link              ::= "[" TEXT "]" "(" TEXT ")"
    DOT_POINT         ::= "-" | "*"
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

from .markdown_events import Event, EventKind, parse_events, stringify_events
from .sections import SectionNumber
from .summary import Link, PartTitle, Separator, Summary, SummaryItem

__all__ = ["SummaryParseError", "SummaryParser", "parse_summary"]

log = logging.getLogger(__name__)


class SummaryParseError(ValueError):
    """Raised when the text of a ``SUMMARY.md`` cannot be parsed."""


@contextmanager
def _context(message: str) -> Iterator[None]:
    try:
        yield
    except SummaryParseError as exc:
        raise SummaryParseError(f"{message}: {exc}") from exc


def _starts(event: Event, tag: str) -> bool:
    return event.kind is EventKind.START and event.tag == tag


def _starts_h1(event: Event) -> bool:
    return _starts(event, "heading") and event.level == 1


def _update_section_numbers(items: list[SummaryItem], level: int, by: int) -> None:
    for item in items:
        if isinstance(item, Link):
            if item.number is not None:
                parts = list(item.number)
                parts[level] += by
                item.number = SectionNumber(parts)
            _update_section_numbers(item.nested_items, level, by)


def _last_link(items: list[SummaryItem]) -> Link:
    for item in reversed(items):
        if isinstance(item, Link):
            return item
    raise SummaryParseError(
        "Unable to get last link because the list of SummaryItems doesn't contain any Links"
    )


class SummaryParser:
    """Parses the text of a ``SUMMARY.md`` into a :class:`Summary`."""

    def __init__(self, text: str) -> None:
        self.source = text
        self._stream = parse_events(text)
        self._offset = 0
        self._back: Event | None = None
        self._root_items = 0

    def next_event(self) -> Event | None:
        """Return the next event, or ``None`` at the end of the text."""
        if self._back is not None:
            event, self._back = self._back, None
            return event
        event = next(self._stream, None)
        if event is not None:
            self._offset = event.offset
        return event

    def _push_back(self, event: Event) -> None:
        if self._back is not None:
            raise RuntimeError("only one event can be pushed back at a time")
        self._back = event

    def _collect_until_end(self, tag: str, level: int | None = None) -> list[Event]:
        events = []
        for event in self._stream:
            if (
                event.kind is EventKind.END
                and event.tag == tag
                and (level is None or event.level == level)
            ):
                return events
            events.append(event)
        log.debug("Reached end of stream without finding the end of %s", tag)
        return events

    def current_location(self) -> tuple[int, int]:
        """Return the line and column of the current event."""
        previous = self.source[: self._offset]
        line = previous.count("\n") + 1
        start_of_line = max(previous.rfind("\n"), 0)
        column = len(self.source[start_of_line : self._offset])
        return line, column

    def _error(self, message: str) -> SummaryParseError:
        line, column = self.current_location()
        return SummaryParseError(
            f"failed to parse SUMMARY.md line {line}, column {column}: {message}"
        )

    def parse(self) -> Summary:
        """Parse the whole text."""
        title = self.parse_title()
        with _context("There was an error parsing the prefix chapters"):
            prefix = self.parse_affix(True)
        with _context("There was an error parsing the numbered chapters"):
            numbered = self.parse_parts()
        with _context("There was an error parsing the suffix chapters"):
            suffix = self.parse_affix(False)
        return Summary(title, prefix, numbered, suffix)

    def parse_title(self) -> str | None:
        """Parse the optional level-one title, skipping HTML such as comments."""
        while (event := self.next_event()) is not None:
            if _starts_h1(event):
                return stringify_events(self._collect_until_end("heading", 1))
            if event.kind is EventKind.HTML:
                continue
            self._push_back(event)
            return None
        return None

    def parse_affix(self, is_prefix: bool) -> list[SummaryItem]:
        """Parse the unnumbered prefix (or suffix) chapters."""
        log.debug("Parsing %s items", "prefix" if is_prefix else "suffix")
        items: list[SummaryItem] = []
        while (event := self.next_event()) is not None:
            if _starts(event, "list") or _starts_h1(event):
                if not is_prefix:
                    raise self._error("Suffix chapters cannot be followed by a list")
                self._push_back(event)
                break
            if _starts(event, "link"):
                items.append(self._parse_link(event.href or ""))
            elif event.kind is EventKind.RULE:
                items.append(Separator())
        return items

    def parse_parts(self) -> list[SummaryItem]:
        """Parse the numbered chapters, split into optionally titled parts."""
        parts: list[SummaryItem] = []
        self._root_items = 0
        while (event := self.next_event()) is not None:
            if _starts(event, "paragraph"):
                self._push_back(event)
                break
            if _starts_h1(event):
                log.debug("Found a h1 in the SUMMARY")
                title = stringify_events(self._collect_until_end("heading", 1))
            else:
                self._push_back(event)
                title = None

            with _context("There was an error parsing the numbered chapters"):
                chapters = self.parse_numbered()

            if title is not None:
                parts.append(PartTitle(title))
            parts.extend(chapters)
        return parts

    def _parse_link(self, href: str) -> Link:
        href = href.replace("%20", " ")
        name = stringify_events(self._collect_until_end("link"))
        return Link(name, Path(href) if href else None)

    def parse_numbered(self) -> list[SummaryItem]:
        """Parse one run of numbered chapters, continuing earlier numbering."""
        items: list[SummaryItem] = []
        first = True
        while (event := self.next_event()) is not None:
            if _starts(event, "paragraph"):
                if not first:
                    self._push_back(event)
                    break
            elif _starts_h1(event):
                self._push_back(event)
                break
            elif _starts(event, "list"):
                self._push_back(event)
                bunch = self._parse_nested_numbered(SectionNumber())
                _update_section_numbers(bunch, 0, self._root_items)
                self._root_items += len(bunch)
                items.extend(bunch)
            elif event.kind is EventKind.START:
                log.debug("Skipping contents of %s", event.tag)
                end = replace(event, kind=EventKind.END)
                while (inner := self.next_event()) is not None and inner != end:
                    pass
            elif event.kind is EventKind.RULE:
                items.append(Separator())
            first = False
        return items

    def _parse_nested_numbered(self, parent: SectionNumber) -> list[SummaryItem]:
        log.debug("Parsing numbered chapters at level %s", parent)
        items: list[SummaryItem] = []
        while (event := self.next_event()) is not None:
            if _starts(event, "item"):
                items.append(self._parse_nested_item(parent, len(items)))
            elif _starts(event, "list"):
                if not items:
                    continue
                last = _last_link(items)
                if last.number is None:
                    raise RuntimeError("numbered chapters always carry a number")
                last.nested_items = self._parse_nested_numbered(last.number)
            elif event.kind is EventKind.END and event.tag == "list":
                break
        return items

    def _parse_nested_item(self, parent: SectionNumber, existing: int) -> Link:
        while (event := self.next_event()) is not None:
            if _starts(event, "paragraph"):
                continue
            if _starts(event, "link"):
                link = self._parse_link(event.href or "")
                link.number = parent.child(existing + 1)
                log.debug("Found chapter: %s %s", link.number, link.name)
                return link
            break
        log.warning("Expected a start of a link, actually got %r", event)
        raise self._error(
            "The link items for nested chapters must only contain a hyperlink"
        )


def parse_summary(text: str) -> Summary:
    """Parse the text of a ``SUMMARY.md`` into a :class:`Summary`."""
    return SummaryParser(text).parse()
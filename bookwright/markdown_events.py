"""A flat stream of Markdown events with source offsets.

The stream mirrors a pull parser: containers produce a START and an END
event, leaves produce a single event.  Tight-list paragraphs, which are
only a rendering detail, are left out of the stream.
"""

from __future__ import annotations

import enum
import functools
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace

from markdown_it import MarkdownIt
from markdown_it.token import Token

__all__ = ["EventKind", "Event", "parse_events", "stringify_events"]


class EventKind(enum.Enum):
    """The kind of a Markdown event."""

    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"


@dataclass(frozen=True, slots=True)
class Event:
    """One event of the stream.

    ``tag`` names the container for START and END events ("paragraph",
    "heading", "list", "item", "link", "emphasis", "strong", "image",
    "code_block", "blockquote", ...).  ``level`` is set for headings and
    ``href`` for links and images.  ``content`` holds the text of TEXT,
    CODE and HTML events.  ``offset`` is the character offset in the
    source where the event begins; it takes no part in comparisons.
    """

    kind: EventKind
    tag: str | None = None
    level: int | None = None
    href: str | None = None
    content: str = ""
    offset: int = field(default=0, compare=False)


_TAG_NAMES = {
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "item",
    "em": "emphasis",
    "s": "strikethrough",
}


@functools.cache
def _markdown() -> MarkdownIt:
    md = MarkdownIt("commonmark")
    # Link destinations are kept exactly as written: ``str`` hands the
    # unescaped destination back unchanged instead of percent-encoding it.
    md.normalizeLink = str
    return md


def _line_starts(text: str) -> list[int]:
    return [0, *(match.end() for match in re.finditer("\n", text))]


def _open_event(token: Token, offset: int) -> Event:
    base = token.type.removesuffix("_open")
    tag = _TAG_NAMES.get(base, base)
    level = int(token.tag[1:]) if base == "heading" else None
    href = token.attrGet("href") if base == "link" else None
    return Event(EventKind.START, tag, level=level, href=href, offset=offset)


def _events(
    tokens: Iterable[Token],
    line_starts: list[int],
    offset: int,
    stack: list[Event],
) -> Iterator[Event]:
    for token in tokens:
        if token.map is not None:
            offset = line_starts[min(token.map[0], len(line_starts) - 1)]
        if token.nesting == 1:
            if token.hidden:
                continue
            event = _open_event(token, offset)
            stack.append(event)
            yield event
        elif token.nesting == -1:
            if token.hidden:
                continue
            yield replace(stack.pop(), kind=EventKind.END)
        else:
            yield from _leaf_events(token, line_starts, offset, stack)


def _leaf_events(
    token: Token, line_starts: list[int], offset: int, stack: list[Event]
) -> Iterator[Event]:
    match token.type:
        case "inline":
            yield from _events(token.children or [], line_starts, offset, stack)
        case "text":
            yield Event(EventKind.TEXT, content=token.content, offset=offset)
        case "code_inline":
            yield Event(EventKind.CODE, content=token.content, offset=offset)
        case "softbreak":
            yield Event(EventKind.SOFT_BREAK, offset=offset)
        case "hardbreak":
            yield Event(EventKind.HARD_BREAK, offset=offset)
        case "html_block" | "html_inline":
            yield Event(EventKind.HTML, content=token.content, offset=offset)
        case "hr":
            yield Event(EventKind.RULE, offset=offset)
        case "fence" | "code_block":
            start = Event(EventKind.START, "code_block", offset=offset)
            yield start
            yield Event(EventKind.TEXT, content=token.content, offset=offset)
            yield replace(start, kind=EventKind.END)
        case "image":
            start = Event(
                EventKind.START, "image", href=token.attrGet("src"), offset=offset
            )
            yield start
            yield from _events(token.children or [], line_starts, offset, stack)
            yield replace(start, kind=EventKind.END)
        case _:
            pass


def parse_events(text: str) -> Iterator[Event]:
    """Parse CommonMark ``text`` and yield its events in document order."""
    tokens = _markdown().parse(text)
    yield from _events(tokens, _line_starts(text), 0, [])


def stringify_events(events: Iterable[Event]) -> str:
    """Drop all styling from ``events`` and return the plain text."""
    return "".join(
        " " if event.kind is EventKind.SOFT_BREAK else event.content
        for event in events
        if event.kind in (EventKind.TEXT, EventKind.CODE, EventKind.SOFT_BREAK)
    )
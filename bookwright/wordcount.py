"""A renderer that counts the words of each chapter of a book."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .book import Book, Chapter

__all__ = [
    "WordcountConfig",
    "OddWordCountError",
    "count_words",
    "write_wordcounts",
]

OUTPUT_FILE = "wordcounts.txt"


class OddWordCountError(Exception):
    """Raised when odd word counts are denied and a chapter has one."""

    def __init__(self, chapter_name: str) -> None:
        super().__init__(f"{chapter_name} has an odd number of words!")
        self.chapter_name = chapter_name


@dataclass
class WordcountConfig:
    """Settings for the word counter."""

    ignores: list[str] = field(default_factory=list)
    deny_odds: bool = False

    @classmethod
    def from_table(cls, table: Any) -> WordcountConfig:
        """Read the settings from a configuration table.

        A missing or malformed table yields the default settings.
        """
        if not isinstance(table, Mapping):
            return cls()
        ignores = table.get("ignores", [])
        deny_odds = table.get("deny-odds", False)
        if (
            not isinstance(ignores, list)
            or not all(isinstance(name, str) for name in ignores)
            or not isinstance(deny_odds, bool)
        ):
            return cls()
        return cls(ignores=list(ignores), deny_odds=deny_odds)


def count_words(chapter: Chapter) -> int:
    """Return the number of whitespace-separated words in the chapter."""
    return len(chapter.content.split())


def write_wordcounts(
    book: Book, config: WordcountConfig, destination: Path | str
) -> list[tuple[str, int]]:
    """Count the words of every chapter and write them to ``wordcounts.txt``.

    Each count is also printed.  Returns the counts in book order.
    """
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    counts: list[tuple[str, int]] = []
    with open(destination / OUTPUT_FILE, "w", encoding="utf-8") as handle:
        for item in book:
            if not isinstance(item, Chapter) or item.name in config.ignores:
                continue
            words = count_words(item)
            line = f"{item.name}: {words}"
            print(line)
            handle.write(line + "\n")
            counts.append((item.name, words))
            if config.deny_odds and words % 2 == 1:
                raise OddWordCountError(item.name)
    return counts
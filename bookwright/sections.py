"""Section numbers such as ``1.2.3.``."""

from __future__ import annotations

import operator
from collections.abc import Iterable

__all__ = ["SectionNumber"]


def _component(value: object) -> int:
    number = operator.index(value)
    if number < 0:
        raise ValueError(f"section number components cannot be negative: {number}")
    return number


class SectionNumber(tuple):
    """An immutable sequence of non-negative section components."""

    __slots__ = ()

    def __new__(cls, parts: Iterable[int] = ()) -> SectionNumber:
        return super().__new__(cls, (_component(part) for part in parts))

    def __str__(self) -> str:
        if not self:
            return "0"
        return "".join(f"{part}." for part in self)

    def __repr__(self) -> str:
        return f"SectionNumber({list(self)!r})"

    def child(self, index: int) -> SectionNumber:
        """Return the number of the sub-section ``index`` below this one."""
        return SectionNumber((*self, _component(index)))
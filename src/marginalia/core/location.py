"""Positions inside a document and the order used to compare them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

Normalizer = Callable[[Any], "Location | None"]

OPERATORS = ("=", "<", "<=", ">", ">=", "firstOnPage")


@dataclass(frozen=True, order=True)
class Location:
    """
    A point in a document.

    `page` is the page (or chapter) index, `top` and `left` are fractions of
    that page measured from its top-left corner.
    """

    page: int
    top: float = 0.0
    left: float = 0.0

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")
        if not 0.0 <= self.top <= 1.0:
            raise ValueError(f"top must be within [0, 1], got {self.top}")
        if not 0.0 <= self.left <= 1.0:
            raise ValueError(f"left must be within [0, 1], got {self.left}")

    def key(self) -> tuple[int, float, float]:
        return (self.page, self.top, self.left)


def to_location(value: Any) -> Location | None:
    """
    Coerce a location-like value into a Location.

    Accepts a Location, a bare page number, or a `(page,)`, `(page, top)` or
    `(page, top, left)` sequence. Anything else gives None.
    """
    if value is None or isinstance(value, Location):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Location(value)
    if isinstance(value, (tuple, list)) and 1 <= len(value) <= 3:
        page, *rest = value
        if not isinstance(page, int) or isinstance(page, bool):
            return None
        try:
            return Location(page, *(float(x) for x in rest))
        except (TypeError, ValueError):
            return None
    return None


def compare(op: str, l1: Any, l2: Any, normalize: Normalizer | None = None) -> bool:
    """
    Compare two locations with `op`.

    A None first operand never satisfies the comparison. A None second
    operand stands for "no bound yet" and is satisfied by every location.
    """
    normalize = normalize or to_location
    loc1 = normalize(l1)
    loc2 = normalize(l2)
    if loc1 is None:
        return False
    if loc2 is None:
        return True

    if op == "=":
        return loc1.key() == loc2.key()
    if op == "<":
        return loc1.key() < loc2.key()
    if op == "<=":
        return loc1.key() <= loc2.key()
    if op == ">":
        return loc1.key() > loc2.key()
    if op == ">=":
        return loc1.key() >= loc2.key()
    if op == "firstOnPage":
        # Later page wins; on the same page the earlier spot wins.
        return (
            loc1.page > loc2.page
            or (loc1.page == loc2.page and loc1.top < loc2.top)
            or (loc1.page == loc2.page and loc1.top == loc2.top and loc1.left < loc2.left)
        )
    raise ValueError(f"Unknown comparison operator: {op!r}")

import re
from typing import Any

from ..core.location import Location, to_location

_NUM = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
PAGE_RE = re.compile(r"^\s*(\d+)\s*$")
PAIR_RE = re.compile(rf"^\s*\(\s*(\d+)\s+\.\s+({_NUM})\s*\)\s*$")
TRIPLE_RE = re.compile(rf"^\s*\(\s*(\d+)\s+({_NUM})\s+\.\s+({_NUM})\s*\)\s*$")


def _num(x: float) -> str:
    return repr(float(x))


class BaseAdapter:
    """
    Shared parts of the document adapters: the persisted location text,
    normalization, selection and liveness.
    """

    kind = "base"

    def __init__(self, document_ref: str, selection: str | None = None):
        self.document_ref = document_ref
        self.selection = selection
        self._closed = False

    def pretty_print(self, location: Location) -> str:
        if location.top <= 0 and location.left <= 0:
            return str(location.page)
        if location.left <= 0:
            return f"({location.page} . {_num(location.top)})"
        return f"({location.page} {_num(location.top)} . {_num(location.left)})"

    def parse(self, text: str | None) -> Location | None:
        if not text:
            return None
        try:
            m = PAGE_RE.match(text)
            if m:
                return Location(int(m.group(1)))
            m = PAIR_RE.match(text)
            if m:
                return Location(int(m.group(1)), float(m.group(2)))
            m = TRIPLE_RE.match(text)
            if m:
                return Location(int(m.group(1)), float(m.group(2)), float(m.group(3)))
        except ValueError:
            return None
        return None

    def convert_location(self, value: Any) -> Location | None:
        if isinstance(value, str):
            return self.parse(value)
        return to_location(value)

    def selected_text(self) -> str | None:
        return self.selection or None

    def is_alive(self) -> bool:
        return not self._closed

    def close(self) -> None:
        self._closed = True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.document_ref!r})"

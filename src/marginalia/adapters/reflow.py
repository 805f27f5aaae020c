from typing import Any

from ..core.location import Location
from ..core.model import ReflowView, Relative, View
from ..core.ports import DocumentAdapter, Prompter
from .base import BaseAdapter


class ReflowAdapter(BaseAdapter, DocumentAdapter):
    """
    Reflowable documents (EPUB). A location is (chapter . fraction through
    the chapter); the view is the visible slice [start, end] of a chapter.
    """

    kind = "reflow"

    def __init__(
        self,
        document_ref: str,
        chapter: int = 0,
        start: float = 0.0,
        end: float = 0.1,
        selection: str | None = None,
    ):
        super().__init__(document_ref, selection)
        self.chapter = chapter
        self.start = start
        self.end = end

    def approx_location(self, precise: Any = None, force_new_ref: bool = False) -> Location:
        if precise is not None:
            position = float(precise[0] if isinstance(precise, (tuple, list)) else precise)
        elif force_new_ref:
            position = self.start
        else:
            position = (self.start + self.end) / 2
        return Location(self.chapter, min(max(position, 0.0), 1.0))

    def precise_location(self, prompter: Prompter) -> Location:
        top, _left = prompter.read_click(self.current_view())
        return Location(self.chapter, self.start + top * (self.end - self.start))

    def goto_location(self, location: Location) -> None:
        span = self.end - self.start
        self.chapter = location.page
        self.start = location.top
        self.end = min(1.0, location.top + span)

    def current_view(self) -> View:
        return ReflowView(self.chapter, self.start, self.end)

    def relative_position(self, location: Location, view: View) -> Relative:
        if not isinstance(view, ReflowView):
            raise TypeError(f"{type(self).__name__} cannot classify against {view!r}")
        key = (location.page, location.top)
        if key < (view.chapter, view.start):
            return "before"
        if key > (view.chapter, view.end):
            return "after"
        return "inside"

    def after_tipping_point(self, threshold: float, location: Location, view: View) -> bool:
        if threshold < 0 or not isinstance(view, ReflowView):
            return False
        span = view.end - view.start
        if span <= 0:
            return False
        return (location.top - view.start) / span > threshold

from typing import Any

from ..core.location import Location
from ..core.model import PagedView, Relative, View
from ..core.ports import DocumentAdapter, Prompter
from .base import BaseAdapter


def _fractions(precise: Any) -> tuple[float, float]:
    if precise is None:
        return 0.0, 0.0
    if isinstance(precise, (tuple, list)):
        top = float(precise[0])
        left = float(precise[1]) if len(precise) > 1 else 0.0
        return top, left
    return float(precise), 0.0


class PagedAdapter(BaseAdapter, DocumentAdapter):
    """
    Fixed-layout documents (PDF, DjVu, PostScript). A location is
    (page, top, left) and the view is the page on screen.
    """

    kind = "paged"

    def __init__(
        self,
        document_ref: str,
        page: int = 1,
        num_pages: int | None = None,
        selection: str | None = None,
    ):
        super().__init__(document_ref, selection)
        self.num_pages = num_pages
        self.page = page

    def approx_location(self, precise: Any = None, force_new_ref: bool = False) -> Location:
        top, left = _fractions(precise)
        return Location(self.page, top, left)

    def precise_location(self, prompter: Prompter) -> Location:
        top, left = prompter.read_click(self.current_view())
        return Location(self.page, top, left)

    def goto_location(self, location: Location) -> None:
        page = max(location.page, 0)
        if self.num_pages is not None:
            page = min(page, self.num_pages)
        self.page = page

    def current_view(self) -> View:
        return PagedView(self.page)

    def relative_position(self, location: Location, view: View) -> Relative:
        if not isinstance(view, PagedView):
            raise TypeError(f"{type(self).__name__} cannot classify against {view!r}")
        if location.page < view.page:
            return "before"
        if location.page > view.page:
            return "after"
        return "inside"

    def after_tipping_point(self, threshold: float, location: Location, view: View) -> bool:
        return threshold >= 0 and location.top > threshold

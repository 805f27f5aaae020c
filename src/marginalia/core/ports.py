from typing import Any, Protocol

from .location import Location
from .model import NoteNode, Relative, View


class StorageStrategy(Protocol):
    """
    One notes file on some medium.
    """

    def read_raw(self) -> str | None:
        pass

    def write_raw(self, contents: str) -> None:
        pass

    def exists(self) -> bool:
        pass

    def stamp(self) -> int | None:
        pass


class ParserStrategy(Protocol):
    """
    Parse outline text into a forest of note nodes. Offsets are in the
    coordinates of the full text, frontmatter included.
    """

    def parse(self, text: str, start: int = 0) -> list[NoteNode]:
        pass


class FrontmatterCodec(Protocol):
    """
    Split optional frontmatter from the outline without enforcing a schema.
    """

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        pass


class IdGenerator(Protocol):
    def new_id(self) -> str:
        pass


class Prompter(Protocol):
    """
    Where the controller waits for the user. Both calls may raise
    InputAborted.
    """

    def read_click(self, view: View) -> tuple[float, float]:
        """Return (top, left) fractions of the clicked spot."""

    def choose(self, prompt: str, candidates: list[str], default: str | None) -> str:
        """Return one of the candidates or free text (empty for none)."""


class DocumentAdapter(Protocol):
    """
    Everything the core needs from a document viewer. One implementation
    per document kind, looked up in adapters.documents.
    """

    kind: str
    document_ref: str

    def approx_location(self, precise: Any = None, force_new_ref: bool = False) -> Location:
        pass

    def precise_location(self, prompter: Prompter) -> Location:
        pass

    def goto_location(self, location: Location) -> None:
        pass

    def current_view(self) -> View:
        pass

    def relative_position(self, location: Location, view: View) -> Relative:
        pass

    def after_tipping_point(self, threshold: float, location: Location, view: View) -> bool:
        pass

    def pretty_print(self, location: Location) -> str:
        pass

    def parse(self, text: str | None) -> Location | None:
        pass

    def convert_location(self, value: Any) -> Location | None:
        pass

    def selected_text(self) -> str | None:
        pass

    def is_alive(self) -> bool:
        pass

    def close(self) -> None:
        pass


class NotesPanel(Protocol):
    """
    The window showing the notes file. Lines are 1-based.
    """

    height: int
    cursor: int

    def is_visible(self) -> bool:
        pass

    def show(self, placement: str, split_fraction: tuple[float, float]) -> None:
        pass

    def line_of(self, offset: int) -> int:
        pass

    def window_start(self) -> int:
        pass

    def window_end(self) -> int:
        pass

    def recenter_top(self, line: int) -> None:
        pass

    def recenter_bottom(self, line: int) -> None:
        pass

    def hide_subtree(self, node: NoteNode) -> None:
        pass

    def hide_drawers(self) -> None:
        pass

    def show_entry(self, node: NoteNode) -> None:
        pass

    def clear(self) -> None:
        pass


class Frame(Protocol):
    def is_alive(self) -> bool:
        pass

    def others_exist(self) -> bool:
        pass

    def close(self) -> None:
        pass

    def reset_layout(self) -> None:
        pass

from ..core.model import NoteNode
from ..core.notebook import Notebook
from ..core.ports import NotesPanel
from ..core.utils import char_offset_to_line


class TextPanel(NotesPanel):
    """
    A headless notes window over a Notebook: tracks what a real window
    would show (visibility, scroll position, cursor, folding) without
    drawing anything.
    """

    def __init__(self, notebook: Notebook, height: int = 40):
        self.notebook = notebook
        self.height = height
        self.cursor = 0
        self.visible = False
        self.placement: str | None = None
        self.split_fraction: tuple[float, float] | None = None
        self._window_start = 1
        self.drawers_hidden = False
        self.hidden: set[str] = set()
        self.shown: set[str] = set()

    def is_visible(self) -> bool:
        return self.visible

    def show(self, placement: str, split_fraction: tuple[float, float]) -> None:
        self.visible = True
        self.placement = placement
        self.split_fraction = split_fraction

    def hide(self) -> None:
        self.visible = False

    def line_of(self, offset: int) -> int:
        return char_offset_to_line(self.notebook.text, offset)

    def window_start(self) -> int:
        return self._window_start

    def window_end(self) -> int:
        return self._window_start + self.height - 1

    def recenter_top(self, line: int) -> None:
        self._window_start = max(1, line)

    def recenter_bottom(self, line: int) -> None:
        # Leave one line of margin under the target, like recenter -2
        self._window_start = max(1, line - self.height + 2)

    def hide_subtree(self, node: NoteNode) -> None:
        self.hidden.add(node.id)
        self.shown.clear()

    def hide_drawers(self) -> None:
        self.drawers_hidden = True

    def show_entry(self, node: NoteNode) -> None:
        self.shown.add(node.id)

    def clear(self) -> None:
        self.hidden.clear()
        self.shown.clear()
        self.drawers_hidden = False

"""
Drives the notes panel from document location changes, and implements
the note insertion and navigation commands of a session.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Literal, TypeVar

from .errors import InputAborted, NoMatch, NoNotesWindow
from .location import Location, compare
from .model import NoteNode, Region, View, ViewInfo
from .ports import Prompter
from .resolver import resolve_view
from .session import Session, SessionRegistry
from .tree import (
    DOCUMENT_PROPERTY,
    LOCATION_PROPERTY,
    containing_note,
    is_switch,
    located_notes,
)

logger = logging.getLogger(__name__)

ControllerState = Literal["idle", "awaiting-input"]
F = TypeVar("F", bound=Callable[..., Any])


def with_valid_session(method: F) -> F:
    """Run `method` only while the session passes its liveness check."""

    @functools.wraps(method)
    def wrapper(self: SyncController, *args: Any, **kwargs: Any) -> Any:
        if not self.registry.check(self.session):
            return None
        return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def notes_count_label(count: int) -> str:
    return "1 note" if count == 1 else f"{count} notes"


def _blank_run_start(text: str, pos: int) -> int:
    """Start of the run of blank lines that ends at line start `pos`."""
    start = pos
    while start > 0 and text[start - 1] == "\n":
        line_start = text.rfind("\n", 0, start - 1) + 1
        if text[line_start:start].strip():
            break
        start = line_start
    return start


def _quote(selection: str) -> str:
    return "".join(f"> {line}".rstrip() + "\n" for line in selection.strip("\n").splitlines())


class SyncController:
    def __init__(self, session: Session, registry: SessionRegistry, prompter: Prompter):
        self.session = session
        self.registry = registry
        self.prompter = prompter
        self.state: ControllerState = "idle"
        self.last_view_info: ViewInfo | None = None
        self._inhibit = False

    # Plumbing

    @property
    def panel(self):
        return self.session.panel

    @property
    def adapter(self):
        return self.session.adapter

    @contextmanager
    def inhibit_location_change(self) -> Iterator[None]:
        """Suppress panel updates while we move the document ourselves."""
        previous = self._inhibit
        self._inhibit = True
        try:
            yield
        finally:
            self._inhibit = previous

    @contextmanager
    def _awaiting_input(self) -> Iterator[None]:
        cursor = self.panel.cursor
        self.state = "awaiting-input"
        try:
            yield
        except InputAborted:
            self.panel.cursor = cursor
            raise
        finally:
            self.state = "idle"

    def view_info(self, view: View | None = None, new_location: Location | None = None) -> ViewInfo:
        session = self.session
        return resolve_view(
            session.parse_root(),
            session.document_ref,
            view if view is not None else self.adapter.current_view(),
            self.adapter,
            session.overrides.closest_tipping_point,
            new_location,
        )

    def notes_count(self) -> str:
        return notes_count_label(self.session.num_notes_in_view)

    def _notes_window(self, trigger: str | None) -> bool:
        overrides = self.session.overrides
        if trigger == "force" or (trigger is not None and trigger in overrides.window_behavior):
            if not self.panel.is_visible():
                self.panel.show(overrides.window_location, overrides.doc_split_fraction)
        return self.panel.is_visible()

    # Location changes

    @with_valid_session
    def start(self) -> ViewInfo | None:
        """Jump to the saved start location, then sync the panel."""
        root = self.session.parse_root()
        if root.location is not None:
            with self.inhibit_location_change():
                self.adapter.goto_location(root.location)
        self._notes_window("start")
        return self.on_location_changed(trigger="start")

    @with_valid_session
    def on_location_changed(self, trigger: str | None = None) -> ViewInfo | None:
        info = self.view_info()
        self.session.num_notes_in_view = info.num_notes_in_view
        self.last_view_info = info

        if not self._inhibit:
            if info.regions:
                kind = "scroll"
            elif info.prev_regions:
                kind = "only-prev"
            else:
                kind = trigger
            if self._notes_window(kind):
                self._focus_notes_region(info)

        if self.session.overrides.auto_save_last_location:
            self._save_location(self.adapter.approx_location())
        return info

    def _focus_notes_region(self, info: ViewInfo) -> None:
        session = self.session
        panel = self.panel
        root = session.parse_root()
        hide_other = session.overrides.hide_other
        if hide_other:
            panel.hide_subtree(root)
        else:
            panel.hide_drawers()

        regions = info.regions or info.prev_regions
        point_before = panel.cursor
        if regions:
            text_len = len(session.notebook.text)
            target: Region | None = None
            for region in regions:
                if point_before >= region.begin and (region.end >= text_len or point_before < region.end):
                    target = region
                    break
            inside = target is not None
            target = target or regions[0]

            first = panel.line_of(target.begin)
            last = panel.line_of(max(target.begin, target.end - 1))
            if last - first + 1 > panel.height or first < panel.window_start():
                panel.recenter_top(first)
            elif last > panel.window_end():
                panel.recenter_bottom(last)

            if inside:
                panel.cursor = point_before
            else:
                node = next((n for n in (root, *root.walk()) if n.begin == target.begin), None)
                panel.cursor = node.contents_begin if node else target.begin
        else:
            self._show_note_entry(root)

        if hide_other:
            for note in info.notes:
                self._show_note_entry(note)

    def _show_note_entry(self, node: NoteNode) -> None:
        """Open `node` and its plain (unlocated, same-document) descendants."""
        self.panel.show_entry(node)
        for child in node.children:
            if child.location is None and not is_switch(child, self.session.document_ref):
                self._show_note_entry(child)

    def _save_location(self, location: Location) -> None:
        root = self.session.parse_root()
        if root.level == 0:
            logger.debug("No document heading to save the location on")
            return
        text = self.adapter.pretty_print(location)
        if root.properties.get_str(LOCATION_PROPERTY) != text:
            self.session.notebook.set_property(root, LOCATION_PROPERTY, text)

    @with_valid_session
    def set_start_location(self, clear: bool = False) -> Location | None:
        if clear:
            root = self.session.parse_root()
            if root.level > 0:
                self.session.notebook.remove_property(root, LOCATION_PROPERTY)
            return None
        location = self.adapter.approx_location()
        self._save_location(location)
        return location

    # Insertion

    @with_valid_session
    def toggle_no_questions(self) -> bool:
        self.session.no_questions = not self.session.no_questions
        return self.session.no_questions

    @with_valid_session
    def insert_precise_note(self) -> NoteNode | None:
        return self.insert_note(precise=True)

    @with_valid_session
    def insert_note(self, precise: bool = False, force_new: bool = False) -> NoteNode | None:
        """
        Add a note for the current location: either merge into a note in
        view chosen by the user, or create a new heading in place.

        Returns the note written to, or None if the user aborted.
        """
        session = self.session
        defaults = session.defaults
        self._notes_window("force")
        selected_text = self.adapter.selected_text()

        try:
            with self._awaiting_input():
                if precise:
                    location = self.adapter.precise_location(self.prompter)
                else:
                    location = self.adapter.approx_location()
                info = self.view_info(new_location=location)
                title, selection = self._ask_title(info, selected_text, precise or force_new)
        except InputAborted:
            logger.info("Note insertion aborted")
            return None

        if selection is not None:
            node, insert_before = selection
            begin = node.begin
            position = self._merge_into(node, insert_before, selected_text)
        else:
            begin, position = self._create_note(info, location, title, selected_text)
            session.num_notes_in_view += 1

        self.panel.cursor = position
        root = session.parse_root()
        written = next((n for n in root.walk() if n.begin == begin), None)
        if session.overrides.hide_other:
            self.panel.hide_subtree(root)
            if written is not None:
                self._show_note_entry(written)
        self.panel.hide_drawers()
        return written

    def _ask_title(
        self, info: ViewInfo, selected_text: str | None, force_new: bool
    ) -> tuple[str, tuple[NoteNode, NoteNode | None] | None]:
        default = None
        if force_new or self.session.no_questions:
            if selected_text and "\n" not in selected_text.strip():
                default = selected_text.strip()
            if self.session.no_questions:
                return default or "", None
            return self.prompter.choose("Note: ", [], default), None

        collection: dict[str, tuple[NoteNode, NoteNode | None]] = {}
        default_begin = -1
        point = self.panel.cursor
        for note, insert_before in info.notes_in_view:
            collection.setdefault(note.title, (note, insert_before))
            if point >= note.begin and note.begin > default_begin:
                default = note.title
                default_begin = note.begin

        title = self.prompter.choose("Note: ", list(collection), default)
        return title, collection.get(title)

    def _insert_block(self, position: int, block: str, blank_before: int) -> tuple[int, int]:
        """
        Insert `block` at line start `position`, replacing the blank lines
        just before it with `blank_before` blank lines. Returns where the
        block starts and the offset just past it.
        """
        notebook = self.session.notebook
        text = notebook.text
        prefix = ""
        if position > 0 and text[position - 1] != "\n":
            prefix = "\n"
            start = position
        else:
            start = _blank_run_start(text, position)
        blank_run = text[start:position]
        if start == 0:
            blank_before = 0
        contents = prefix + "\n" * blank_before + block
        notebook.replace(start, position, contents + blank_run)
        return start + len(contents) - len(block), start + len(contents)

    def _selection_block(self, selected_text: str | None) -> str:
        if not selected_text or not self.session.defaults.insert_selected_text_inside_note:
            return ""
        if "\n" in selected_text.strip():
            return _quote(selected_text)
        return selected_text.strip() + "\n"

    def _merge_into(self, note: NoteNode, insert_before: NoteNode | None, selected_text: str | None) -> int:
        text = self.session.notebook.text
        first = note.children[0] if note.children else None
        has_content = note.has_body(text) or (first is not None and first.location is None)
        position = insert_before.begin if insert_before is not None else note.end
        block = self._selection_block(selected_text)
        if not block:
            return position
        blank = 1 if has_content or self.session.defaults.separate_notes_from_heading else 0
        logger.debug("Merging into note %s", note.id)
        _start, end = self._insert_block(position, block, blank)
        return end

    def _create_note(
        self, info: ViewInfo, location: Location, title: str, selected_text: str | None
    ) -> tuple[int, int]:
        session = self.session
        defaults = session.defaults
        root = session.parse_root()
        reference = info.reference_for_insertion

        if reference is not None:
            position = reference.node.begin if reference.side == "before" else reference.node.end
        else:
            position = root.children[0].begin if root.children else root.end
        level = root.level + 1

        title = " ".join(title.split())
        if not title:
            title = defaults.default_heading_title.replace("$p$", self.adapter.pretty_print(location))

        drawer = f":{LOCATION_PROPERTY}: {self.adapter.pretty_print(location)}\n"
        if defaults.doc_property_in_notes:
            drawer += f":{DOCUMENT_PROPERTY}: {session.document_ref}\n"
        block = f"{'#' * level} {title}\n:PROPERTIES:\n{drawer}:END:\n"

        body = ""
        if selected_text and selected_text.strip() != title:
            body = self._selection_block(selected_text)
        if body and defaults.separate_notes_from_heading:
            body = "\n" + body

        logger.debug("Creating note %r at level %d", title, level)
        return self._insert_block(position, block + body, 1)

    # Navigation

    def _require_panel(self) -> None:
        if not self.panel.is_visible():
            raise NoNotesWindow("No notes window exists")

    def _go_to_note(self, node: NoteNode) -> NoteNode:
        self.panel.cursor = node.begin
        with self.inhibit_location_change():
            self.adapter.goto_location(node.location)
            self.on_location_changed()
        single = ViewInfo(
            notes_in_view=[(node, None)],
            regions=[Region(node.begin, node.end)],
            num_notes_in_view=1,
        )
        self._focus_notes_region(single)
        self.panel.cursor = node.begin
        return node

    @with_valid_session
    def prev_note(self) -> NoteNode:
        self._require_panel()
        root = self.session.parse_root()
        current = containing_note(root, self.panel.cursor, self.session.document_ref)
        previous = None
        if current is not None:
            for node in located_notes(root, self.session.document_ref):
                if node.begin >= current.begin:
                    break
                previous = node
        if previous is None:
            raise NoMatch("There is no previous note")
        return self._go_to_note(previous)

    @with_valid_session
    def current_note(self) -> NoteNode:
        self._require_panel()
        root = self.session.parse_root()
        current = containing_note(root, self.panel.cursor, self.session.document_ref)
        if current is None:
            raise NoMatch("No note selected")
        return self._go_to_note(current)

    @with_valid_session
    def next_note(self) -> NoteNode:
        self._require_panel()
        root = self.session.parse_root()
        cursor = self.panel.cursor
        for node in located_notes(root, self.session.document_ref):
            if node.begin > cursor:
                return self._go_to_note(node)
        raise NoMatch("There is no next note")

    def _go_to_page(self, target: Location) -> Location:
        with self.inhibit_location_change():
            self.adapter.goto_location(target)
        self.on_location_changed(trigger="force")
        return target

    @with_valid_session
    def prev_page(self) -> Location:
        """Go to the closest earlier page (or chapter) that has notes."""
        self._notes_window("force")
        this = Location(self.adapter.approx_location().page, 0.0, 0.0)
        target = None
        for node in located_notes(self.session.parse_root(), self.session.document_ref):
            if compare("<", node.location, this) and compare("firstOnPage", node.location, target):
                target = node.location
        if target is None:
            raise NoMatch("There are no more previous pages or chapters with notes")
        return self._go_to_page(target)

    @with_valid_session
    def current_page(self) -> ViewInfo | None:
        self._notes_window("force")
        return self.on_location_changed(trigger="force")

    @with_valid_session
    def next_page(self) -> Location:
        """Go to the closest later page (or chapter) that has notes."""
        self._notes_window("force")
        this = Location(self.adapter.approx_location().page, 1.0, 1.0)
        target = None
        for node in located_notes(self.session.parse_root(), self.session.document_ref):
            if compare(">", node.location, this) and compare("<", node.location, target):
                target = node.location
        if target is None:
            raise NoMatch("There are no more following pages or chapters with notes")
        return self._go_to_page(target)

    def kill(self) -> None:
        self.registry.kill(self.session)

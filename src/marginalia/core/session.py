"""
Sessions bind one document to one subtree of a notes file.

Lifecycle: a session is created and registered, then checked for liveness
before every operation; the first failed check kills it. Killing the last
live session runs the registry's teardown hooks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Callable, Literal

from ..adapters.yaml_codec import decode_value
from ..config import WINDOW_BEHAVIORS, WINDOW_LOCATIONS, NotesConfig
from .errors import IdCollision
from .meta import DISABLE
from .model import NoteNode
from .notebook import Notebook
from .ports import DocumentAdapter, Frame, IdGenerator, NotesPanel
from .tree import DOCUMENT_PROPERTY, annotate, same_document

logger = logging.getLogger(__name__)

State = Literal["created", "valid", "killed"]

WINDOW_BEHAVIOR_PROPERTY = "NOTER_NOTES_WINDOW_BEHAVIOR"
WINDOW_LOCATION_PROPERTY = "NOTER_NOTES_WINDOW_LOCATION"
DOC_SPLIT_FRACTION_PROPERTY = "NOTER_DOCUMENT_SPLIT_FRACTION"
AUTO_SAVE_LAST_LOCATION_PROPERTY = "NOTER_AUTO_SAVE_LAST_LOCATION"
HIDE_OTHER_PROPERTY = "NOTER_HIDE_OTHER"
CLOSEST_TIPPING_POINT_PROPERTY = "NOTER_CLOSEST_TIPPING_POINT"


@dataclass(frozen=True)
class Overrides:
    window_behavior: tuple[str, ...]
    window_location: str
    doc_split_fraction: tuple[float, float]
    auto_save_last_location: bool
    hide_other: bool
    closest_tipping_point: float


def _override(root: NoteNode, name: str) -> Any:
    return decode_value(root.properties.get_str(name))


def _flag(root: NoteNode, name: str, default: bool) -> bool:
    value = _override(root, name)
    if value is None:
        return default
    if value == DISABLE:
        return False
    if isinstance(value, bool):
        return value
    logger.warning("Ignoring %s: expected true, false or disable, got %r", name, value)
    return default


def resolve_overrides(root: NoteNode, defaults: NotesConfig) -> Overrides:
    """Per-document property, then `disable` meaning off, then the global default."""
    behavior = _override(root, WINDOW_BEHAVIOR_PROPERTY)
    if behavior == DISABLE:
        behavior = ()
    elif isinstance(behavior, str):
        behavior = (behavior,)
    if behavior is None or not all(b in WINDOW_BEHAVIORS for b in behavior):
        if behavior is not None:
            logger.warning("Ignoring %s: %r", WINDOW_BEHAVIOR_PROPERTY, behavior)
        behavior = defaults.window_behavior

    location = _override(root, WINDOW_LOCATION_PROPERTY)
    if location not in WINDOW_LOCATIONS:
        location = defaults.window_location

    fraction = _override(root, DOC_SPLIT_FRACTION_PROPERTY)
    if (
        isinstance(fraction, list)
        and len(fraction) == 2
        and all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in fraction)
    ):
        fraction = (float(fraction[0]), float(fraction[1]))
    else:
        fraction = defaults.doc_split_fraction

    tipping = _override(root, CLOSEST_TIPPING_POINT_PROPERTY)
    if tipping == DISABLE:
        tipping = -1.0
    elif isinstance(tipping, (int, float)) and not isinstance(tipping, bool):
        tipping = float(tipping)
    else:
        tipping = defaults.closest_tipping_point

    return Overrides(
        window_behavior=tuple(behavior),
        window_location=location,
        doc_split_fraction=fraction,
        auto_save_last_location=_flag(
            root, AUTO_SAVE_LAST_LOCATION_PROPERTY, defaults.auto_save_last_location
        ),
        hide_other=_flag(root, HIDE_OTHER_PROPERTY, defaults.hide_other),
        closest_tipping_point=tipping,
    )


def find_document_root(whole: NoteNode, document_ref: str, title: str | None = None) -> NoteNode:
    """
    The outermost heading bound to `document_ref` (preferring one titled
    `title`), or the whole file when no heading names the document.
    """
    first = None
    for node in whole.walk():
        if same_document(node.document_ref, document_ref):
            if title is None or node.title == title:
                return node
            first = first or node
    return first or whole


def parse_root(notebook: Notebook, adapter: DocumentAdapter, title: str | None = None) -> NoteNode:
    """Resolve the session root from raw arguments, without a session."""
    whole = annotate(notebook.root(), adapter.parse)
    return find_document_root(whole, adapter.document_ref, title)


class Session:
    def __init__(
        self,
        id: str,
        adapter: DocumentAdapter,
        notebook: Notebook,
        frame: Frame,
        panel: NotesPanel,
        root_title: str | None,
        defaults: NotesConfig,
    ):
        self.id = id
        self.adapter = adapter
        self.notebook = notebook
        self.frame = frame
        self.panel = panel
        self.root_title = root_title
        self.defaults = defaults
        self.state: State = "created"
        self.num_notes_in_view = 0
        self.no_questions = defaults.insert_note_no_questions
        self._cached_root: tuple[NoteNode, int] | None = None
        self.overrides = resolve_overrides(self.parse_root(), defaults)

    @property
    def document_ref(self) -> str:
        return self.adapter.document_ref

    def is_live(self) -> bool:
        return self.frame.is_alive() and self.adapter.is_alive() and self.notebook.is_alive()

    def parse_root(self) -> NoteNode:
        """The session's root node, re-parsed only when the notes file changed."""
        stamp = self.notebook.stamp
        if self._cached_root is not None and self._cached_root[1] == stamp:
            return self._cached_root[0]
        root = parse_root(self.notebook, self.adapter, self.root_title)
        root.session_id = self.id
        self._cached_root = (root, stamp)
        return root

    def forget(self) -> None:
        if self._cached_root is not None:
            self._cached_root[0].session_id = None
        self._cached_root = None

    def __repr__(self) -> str:
        return f"Session({self.id!r}, {self.document_ref!r}, state={self.state!r})"


Hook = tuple[Callable[[], None], Callable[[], None]]


class SessionRegistry:
    """
    All live sessions of the process.

    `hooks` are (install, teardown) pairs: installs run when the first
    session registers, teardowns when the last one is killed.
    """

    def __init__(self, hooks: list[Hook] | None = None):
        self.sessions: dict[str, Session] = {}
        self.hooks = list(hooks or [])
        self.hooks_installed = False

    def __len__(self) -> int:
        return len(self.sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self.sessions

    def get(self, session_id: str) -> Session | None:
        return self.sessions.get(session_id)

    def new_id(self, idgen: IdGenerator, attempts: int = 8) -> str:
        for _ in range(attempts):
            candidate = idgen.new_id()
            if candidate not in self.sessions:
                return candidate
            logger.debug("Session id %s already taken, drawing again", candidate)
        raise IdCollision(f"No free session id after {attempts} attempts")

    def register(self, session: Session) -> None:
        if session.id in self.sessions:
            raise IdCollision(f"Session id {session.id} already registered")
        if not self.sessions and not self.hooks_installed:
            for install, _teardown in self.hooks:
                install()
            self.hooks_installed = True
        self.sessions[session.id] = session
        session.state = "valid"

    def unregister(self, session: Session) -> None:
        self.sessions.pop(session.id, None)
        if not self.sessions and self.hooks_installed:
            for _install, teardown in self.hooks:
                teardown()
            self.hooks_installed = False

    def check(self, session: Session) -> bool:
        """
        Liveness check run before every operation. A dead session is
        killed on the spot.
        """
        if session.state == "killed":
            return False
        if session.is_live():
            return True
        logger.info("Session %s is no longer valid, killing it", session.id)
        self.kill(session)
        return False

    def create(
        self,
        adapter: DocumentAdapter,
        notebook: Notebook,
        frame: Frame,
        panel: NotesPanel,
        defaults: NotesConfig,
        idgen: IdGenerator,
        id_attempts: int = 8,
        root_title: str | None = None,
        create_heading: bool = True,
    ) -> Session:
        """
        Bind `adapter`'s document to its subtree of `notebook`, creating a
        top-level heading for it when none exists and `create_heading`.
        """
        root = parse_root(notebook, adapter, root_title)
        if root.level == 0 and create_heading:
            root_title = root_title or PurePath(adapter.document_ref).stem
            text = notebook.text
            prefix = "" if not text or text.endswith("\n") else "\n"
            if text.strip():
                prefix += "\n"
            notebook.insert(
                len(text),
                f"{prefix}# {root_title}\n:PROPERTIES:\n"
                f":{DOCUMENT_PROPERTY}: {adapter.document_ref}\n:END:\n",
            )
            logger.info("Created heading %r for %s", root_title, adapter.document_ref)
        elif root.level > 0:
            root_title = root.title

        session_id = self.new_id(idgen, id_attempts)
        session = Session(session_id, adapter, notebook, frame, panel, root_title, defaults)
        self.register(session)
        logger.info("Session %s started for %s", session.id, adapter.document_ref)
        return session

    def kill(self, session: Session) -> None:
        if session.state == "killed":
            return
        self.unregister(session)
        session.state = "killed"
        session.panel.clear()
        session.forget()
        session.adapter.close()
        if session.defaults.kill_frame_at_session_end and session.frame.others_exist():
            session.frame.close()
        else:
            session.frame.reset_layout()
        logger.info("Session %s killed", session.id)

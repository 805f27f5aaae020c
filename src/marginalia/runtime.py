"""Runtime wiring helper for the CLI and the API."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .adapters.documents import adapter_for
from .adapters.frame import HeadlessFrame
from .adapters.fs_storage import FsStorage, MemoryStorage
from .adapters.idgen import HexId
from .adapters.outline_parser import OutlineParser
from .adapters.panel import TextPanel
from .adapters.prompts import ScriptedPrompter
from .adapters.yaml_codec import YamlFrontmatter
from .config import MarginaliaConfig, load_config
from .core.controller import SyncController, notes_count_label
from .core.errors import InvalidSession
from .core.model import ViewInfo
from .core.notebook import Notebook
from .core.ports import Frame, Prompter
from .core.session import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Container for all wired components."""
    config: MarginaliaConfig
    registry: SessionRegistry
    idgen: HexId
    controllers: dict[str, SyncController] = field(default_factory=dict)


def build_runtime(
    config_path: Path | None = None,
    notes_path: Path | None = None,
) -> Runtime:
    """Build and wire the components shared by every session."""
    config = load_config(config_path=config_path, notes_path=notes_path)
    rt = Runtime(
        config=config,
        registry=SessionRegistry(),
        idgen=HexId(nbytes=config.session.id_bytes),
    )

    def install() -> None:
        logger.debug("First session started, location sync enabled")

    def teardown() -> None:
        logger.debug("Last session killed, dropping controllers")
        rt.controllers.clear()

    rt.registry.hooks.append((install, teardown))
    return rt


def open_notebook(path: Path | None = None, contents: str | None = None) -> Notebook:
    """A notes file on disk (created if missing), or in memory when no path is given."""
    if path is not None:
        storage = FsStorage(path)
        if not storage.exists():
            storage.write_raw(contents or "")
    else:
        storage = MemoryStorage(contents or "")
    return Notebook(storage, OutlineParser(), YamlFrontmatter())


def open_session(
    rt: Runtime,
    notebook: Notebook,
    document_ref: str,
    kind: str | None = None,
    prompter: Prompter | None = None,
    frame: Frame | None = None,
    root_title: str | None = None,
    **state: Any,
) -> SyncController:
    """
    Start a session for `document_ref` and sync its panel once.

    Raises UnsupportedDocument before anything is created when no adapter
    handles the document.
    """
    adapter = adapter_for(document_ref, kind, **state)
    session = rt.registry.create(
        adapter,
        notebook,
        frame or HeadlessFrame(),
        TextPanel(notebook, rt.config.panel.height),
        rt.config.notes,
        rt.idgen,
        id_attempts=rt.config.session.id_attempts,
        root_title=root_title,
    )
    controller = SyncController(session, rt.registry, prompter or ScriptedPrompter())
    rt.controllers[session.id] = controller
    controller.start()
    return controller


def close_session(rt: Runtime, session_id: str) -> bool:
    controller = rt.controllers.pop(session_id, None)
    if controller is None:
        return False
    controller.kill()
    return True


def live_controller(rt: Runtime, session_id: str) -> SyncController | None:
    """The controller for `session_id` if its session is still valid."""
    controller = rt.controllers.get(session_id)
    if controller is None:
        return None
    if not rt.registry.check(controller.session):
        rt.controllers.pop(session_id, None)
        return None
    return controller


def require_controller(rt: Runtime, session_id: str) -> SyncController:
    controller = live_controller(rt, session_id)
    if controller is None:
        raise InvalidSession(f"Session {session_id} is not live")
    return controller


def describe_view(controller: SyncController, info: ViewInfo) -> dict[str, Any]:
    """JSON-ready summary of a ViewInfo."""
    adapter = controller.adapter
    reference = info.reference_for_insertion
    return {
        "session": controller.session.id,
        "count": notes_count_label(info.num_notes_in_view),
        "notes": [
            {
                "id": note.id,
                "title": note.title,
                "location": adapter.pretty_print(note.location) if note.location else None,
                "insert_before": before.id if before else None,
            }
            for note, before in info.notes_in_view
        ],
        "regions": [[r.begin, r.end] for r in info.regions],
        "prev_regions": [[r.begin, r.end] for r in info.prev_regions],
        "reference": {"side": reference.side, "id": reference.node.id} if reference else None,
    }

"""FastAPI application exposing marginalia sessions as a local JSON API."""

import secrets
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from .. import __version__
from ..adapters.documents import kind_for
from ..adapters.prompts import ScriptedPrompter
from ..core.controller import SyncController
from ..core.errors import InvalidSession, NoMatch, NoNotesWindow, UnsupportedDocument
from ..runtime import (
    Runtime,
    close_session,
    describe_view,
    live_controller,
    open_notebook,
    open_session,
    require_controller,
)


class SessionRequest(BaseModel):
    document: str
    notes_path: str | None = None
    notes_text: str | None = None
    kind: str | None = None
    page: int = 1
    start: float = 0.0
    end: float = 0.1
    selection: str | None = None
    root_title: str | None = None


class LocationRequest(BaseModel):
    page: int
    top: float = Field(0.0, ge=0.0, le=1.0)
    end: float | None = Field(None, ge=0.0, le=1.0)
    selection: str | None = None


class NoteRequest(BaseModel):
    title: str | None = None
    new: bool = False
    precise: bool = False
    click: tuple[float, float] | None = None


class StartLocationRequest(BaseModel):
    clear: bool = False


NAVIGATION = {
    "prev-note": "prev_note",
    "current-note": "current_note",
    "next-note": "next_note",
    "prev-page": "prev_page",
    "current-page": "current_page",
    "next-page": "next_page",
}


def generate_token() -> str:
    """Generate a secure random bearer token."""
    return secrets.token_urlsafe(32)


def create_app(runtime: Runtime, token: str | None = None) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime holding the session registry
        token: Bearer token for authentication (None to disable auth)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Marginalia API",
        description="Local JSON API for document-synced notes",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    def controller_for(session_id: str) -> SyncController:
        try:
            return require_controller(runtime, session_id)
        except InvalidSession as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "sessions": len(runtime.registry)}

    @app.post("/sessions", status_code=201)
    async def create_session(req: SessionRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Bind a document to its notes and sync once."""
        notebook = open_notebook(
            Path(req.notes_path) if req.notes_path else None, req.notes_text
        )
        kind = req.kind or kind_for(req.document)
        if kind == "reflow":
            state = {"chapter": req.page, "start": req.start, "end": req.end}
        else:
            state = {"page": req.page}
        try:
            controller = open_session(
                runtime,
                notebook,
                req.document,
                kind=req.kind,
                prompter=ScriptedPrompter(),
                root_title=req.root_title,
                selection=req.selection,
                **state,
            )
        except UnsupportedDocument as e:
            raise HTTPException(status_code=415, detail=str(e)) from e
        info = controller.last_view_info or controller.view_info()
        return describe_view(controller, info)

    @app.get("/sessions")
    async def list_sessions(auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """List live sessions."""
        result = []
        for session_id in list(runtime.controllers):
            controller = live_controller(runtime, session_id)
            if controller is not None:
                session = controller.session
                result.append({
                    "id": session.id,
                    "document": session.document_ref,
                    "kind": session.adapter.kind,
                    "count": controller.notes_count(),
                })
        return result

    @app.get("/sessions/{session_id}/view")
    async def get_view(session_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Notes in the current view, without touching the panel."""
        controller = controller_for(session_id)
        return describe_view(controller, controller.view_info())

    @app.post("/sessions/{session_id}/location")
    async def change_location(
        session_id: str, req: LocationRequest, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """The document moved: update it and sync the panel."""
        controller = controller_for(session_id)
        adapter = controller.adapter
        with controller.inhibit_location_change():
            adapter.goto_location(adapter.convert_location((req.page, req.top)))
            if req.end is not None and hasattr(adapter, "end"):
                adapter.end = max(req.end, req.top)
        adapter.selection = req.selection
        info = controller.on_location_changed()
        if info is None:
            raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
        return describe_view(controller, info)

    @app.post("/sessions/{session_id}/notes")
    async def insert_note(
        session_id: str, req: NoteRequest, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Insert a note at the current location."""
        controller = controller_for(session_id)
        controller.prompter = ScriptedPrompter(
            clicks=[req.click] if req.click else [],
            answers=[req.title] if req.title is not None else [],
        )
        if req.precise:
            node = controller.insert_precise_note()
        else:
            node = controller.insert_note(force_new=req.new)
        if node is None:
            raise HTTPException(status_code=409, detail="Note insertion aborted")
        return {"id": node.id, "title": node.title, "count": controller.notes_count()}

    @app.post("/sessions/{session_id}/navigate/{target}")
    async def navigate(session_id: str, target: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Previous, current or next note or page."""
        controller = controller_for(session_id)
        method = NAVIGATION.get(target)
        if method is None:
            raise HTTPException(status_code=404, detail=f"Unknown navigation target {target}")
        try:
            getattr(controller, method)()
        except (NoMatch, NoNotesWindow) as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        location = controller.adapter.approx_location()
        return {
            "location": controller.adapter.pretty_print(location),
            "cursor": controller.panel.cursor,
            "count": controller.notes_count(),
        }

    @app.put("/sessions/{session_id}/start-location")
    async def set_start_location(
        session_id: str, req: StartLocationRequest, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Save (or clear) the location the document opens at."""
        controller = controller_for(session_id)
        location = controller.set_start_location(clear=req.clear)
        return {"location": controller.adapter.pretty_print(location) if location else None}

    @app.post("/sessions/{session_id}/no-questions")
    async def toggle_no_questions(session_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        controller = controller_for(session_id)
        return {"no_questions": controller.toggle_no_questions()}

    @app.get("/sessions/{session_id}/notes-file")
    async def notes_file(session_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        controller = controller_for(session_id)
        return {"text": controller.session.notebook.text}

    @app.delete("/sessions/{session_id}")
    async def kill_session(
        session_id: str, save: bool = True, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Save the notes (unless save=false) and end the session."""
        controller = controller_for(session_id)
        if save:
            controller.session.notebook.save()
        close_session(runtime, session_id)
        return {"killed": session_id}

    return app

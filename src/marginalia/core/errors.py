"""Exceptions raised by the synchronization core."""


class MarginaliaError(Exception):
    """Base class for every error raised by marginalia."""


class UnsupportedDocument(MarginaliaError):
    """No document adapter is registered for the requested document kind."""

    def __init__(self, document: str, kind: str | None = None):
        self.document = document
        self.kind = kind
        detail = f" (kind {kind!r})" if kind else ""
        super().__init__(f"Document handler not supported for {document}{detail}")


class InvalidSession(MarginaliaError):
    """The session's frame, document or notes file is gone."""


class NoNotesWindow(MarginaliaError):
    """A command needs the notes panel but it is not visible."""


class NoMatch(MarginaliaError):
    """A navigation scan found no note or page to go to."""


class IdCollision(MarginaliaError):
    """Could not draw a session id that is not already taken."""


class InputAborted(MarginaliaError):
    """The user cancelled while the controller was waiting for input."""

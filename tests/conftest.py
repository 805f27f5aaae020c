"""Shared fixtures for building outline notes files."""

import pytest

from marginalia.core.model import NoteNode


def _heading(level, title, page=None, document=None, body="", props=None):
    lines = []
    if document is not None:
        lines.append(f":NOTER_DOCUMENT: {document}\n")
    if page is not None:
        lines.append(f":NOTER_PAGE: {page}\n")
    for name, value in (props or {}).items():
        lines.append(f":{name}: {value}\n")
    drawer = ":PROPERTIES:\n" + "".join(lines) + ":END:\n" if lines else ""
    return f"{'#' * level} {title}\n{drawer}{body}\n"


def _find(root: NoteNode, title: str) -> NoteNode:
    for node in (root, *root.walk()):
        if node.title == title:
            return node
    raise KeyError(title)


@pytest.fixture
def heading():
    """Render one heading: title line, optional drawer, body, blank line."""
    return _heading


@pytest.fixture
def find():
    """Look a node up by title."""
    return _find


@pytest.fixture
def book(heading):
    """A document heading with notes on pages 1, 3 and (3 . 0.5)."""
    return (
        heading(1, "Book", document="book.pdf")
        + heading(2, "A", page=1)
        + heading(2, "B", page=3)
        + heading(2, "C", page="(3 . 0.5)")
    )

"""Walking the note outline while honoring document-switch markers."""

from __future__ import annotations

import os
from typing import Callable, Iterator

from .location import Location
from .model import NoteNode

DOCUMENT_PROPERTY = "NOTER_DOCUMENT"
LOCATION_PROPERTY = "NOTER_PAGE"


def same_document(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return False
    return os.path.normpath(os.path.expanduser(a)) == os.path.normpath(os.path.expanduser(b))


def annotate(root: NoteNode, parse_location: Callable[[str | None], Location | None]) -> NoteNode:
    """Fill `document_ref` and `location` of every node from its properties."""
    for node in (root, *root.walk()):
        node.document_ref = node.properties.get_str(DOCUMENT_PROPERTY)
        node.location = parse_location(node.properties.get_str(LOCATION_PROPERTY))
    return root


def is_switch(node: NoteNode, document_ref: str) -> bool:
    """True if `node` annotates some other document."""
    return node.document_ref is not None and not same_document(node.document_ref, document_ref)


def iter_notes(root: NoteNode, document_ref: str) -> Iterator[tuple[NoteNode, bool]]:
    """
    Pre-order over the descendants of `root` as (node, switched) pairs.

    A switched node is yielded once and its subtree is never entered.
    """
    for child in root.children:
        switched = is_switch(child, document_ref)
        yield child, switched
        if not switched:
            yield from iter_notes(child, document_ref)


def located_notes(root: NoteNode, document_ref: str) -> Iterator[NoteNode]:
    for node, switched in iter_notes(root, document_ref):
        if not switched and node.location is not None:
            yield node


def containing_note(root: NoteNode, offset: int, document_ref: str) -> NoteNode | None:
    """The deepest located note under `root` whose span holds `offset`."""
    found = None
    for node in located_notes(root, document_ref):
        if node.begin <= offset < node.end:
            found = node
    return found

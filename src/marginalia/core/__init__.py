"""Synchronization core: locations, outline traversal, view resolution."""

from .errors import MarginaliaError
from .location import Location, compare
from .model import NoteNode, PagedView, ReflowView, ViewInfo
from .resolver import resolve_view

__all__ = [
    "Location",
    "MarginaliaError",
    "NoteNode",
    "PagedView",
    "ReflowView",
    "ViewInfo",
    "compare",
    "resolve_view",
]

"""Registry of document adapters, keyed by kind tag and file extension."""

from pathlib import PurePath
from typing import Any, Callable

from ..core.errors import UnsupportedDocument
from ..core.ports import DocumentAdapter
from .paged import PagedAdapter
from .reflow import ReflowAdapter

AdapterFactory = Callable[..., DocumentAdapter]

ADAPTERS: dict[str, AdapterFactory] = {
    "paged": PagedAdapter,
    "reflow": ReflowAdapter,
}

EXTENSIONS: dict[str, str] = {
    ".pdf": "paged",
    ".djvu": "paged",
    ".ps": "paged",
    ".xps": "paged",
    ".epub": "reflow",
}


def register_adapter(kind: str, factory: AdapterFactory, extensions: tuple[str, ...] = ()) -> None:
    ADAPTERS[kind] = factory
    for ext in extensions:
        EXTENSIONS[ext.lower()] = kind


def kind_for(document_ref: str) -> str | None:
    return EXTENSIONS.get(PurePath(document_ref).suffix.lower())


def adapter_for(document_ref: str, kind: str | None = None, **state: Any) -> DocumentAdapter:
    """
    Build the adapter for `document_ref`.

    `kind` overrides detection by extension; `state` is passed to the
    adapter (initial page, selection, ...).
    """
    kind = kind or kind_for(document_ref)
    factory = ADAPTERS.get(kind) if kind else None
    if factory is None:
        raise UnsupportedDocument(document_ref, kind)
    return factory(document_ref, **state)

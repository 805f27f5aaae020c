from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Literal, Union

from .location import Location
from .meta import PropertyBag

NodeId = str
Relative = Literal["before", "inside", "after"]
Side = Literal["before", "after"]


@dataclass(frozen=True)
class Region:
    begin: int  # char offsets into the notes text
    end: int


@dataclass(frozen=True)
class PagedView:
    page: int


@dataclass(frozen=True)
class ReflowView:
    chapter: int
    start: float  # visible slice of the chapter, as fractions
    end: float


View = Union[PagedView, ReflowView]


@dataclass(eq=False)
class NoteNode:
    id: NodeId
    level: int  # 0 for the synthetic whole-file root
    title: str
    begin: int
    end: int  # end of the whole subtree
    contents_begin: int  # first offset after heading line and property drawer
    properties: PropertyBag = field(default_factory=PropertyBag)
    location: Location | None = None
    document_ref: str | None = None
    children: list[NoteNode] = field(default_factory=list)
    session_id: str | None = None

    def walk(self) -> Iterator[NoteNode]:
        """Pre-order over descendants, not including self."""
        for child in self.children:
            yield child
            yield from child.walk()

    def has_body(self, text: str) -> bool:
        """True if there is non-blank text between the drawer and the first child."""
        stop = self.children[0].begin if self.children else self.end
        return bool(text[self.contents_begin:stop].strip())

    def __repr__(self) -> str:
        return f"NoteNode({self.id!r}, level={self.level}, location={self.location})"


@dataclass(frozen=True)
class Reference:
    side: Side
    node: NoteNode


@dataclass
class ViewInfo:
    notes_in_view: list[tuple[NoteNode, NoteNode | None]] = field(default_factory=list)
    regions: list[Region] = field(default_factory=list)
    prev_regions: list[Region] = field(default_factory=list)
    reference_for_insertion: Reference | None = None
    num_notes_in_view: int = 0

    @property
    def notes(self) -> list[NoteNode]:
        return [note for note, _ in self.notes_in_view]

"""
Map the current document view onto the note outline.

`resolve_view` walks the session root once, in pre-order, and collects:

- the notes whose location is inside the view, each paired with the first
  out-of-view note found inside its own span (where merged text must go
  before);
- the regions of the notes text those notes cover, merged when contiguous;
- the closest notes before the view, paired the same way, used when every
  in-view note sits past the tipping point of the view (or when nothing is
  in view at all);
- when a new location is given, the note to insert a new heading next to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from .location import Location, compare
from .model import NoteNode, Reference, Region, View, ViewInfo
from .ports import DocumentAdapter
from .tree import iter_notes

logger = logging.getLogger(__name__)

RegionKind = Literal["in-view", "closest"]


@dataclass
class _RegionAccumulator:
    """Open region being grown: (start, max end) plus which set it belongs to."""

    kind: RegionKind
    start: int
    max_end: int


@dataclass
class _Walk:
    regions: list[Region] = field(default_factory=list)
    closest_regions: list[Region] = field(default_factory=list)
    current: _RegionAccumulator | None = None

    def _target(self, kind: RegionKind) -> list[Region]:
        return self.regions if kind == "in-view" else self.closest_regions

    def finish(self, terminator: NoteNode | None = None) -> None:
        info = self.current
        if info is None:
            return
        end = info.max_end if terminator is None else min(info.max_end, terminator.begin)
        self._target(info.kind).append(Region(info.start, end))
        self.current = None

    def add(self, kind: RegionKind, node: NoteNode) -> None:
        info = self.current
        if info is not None and (info.kind != kind or node.begin > info.max_end):
            self.finish(node)
            info = None
        if info is None:
            self.current = _RegionAccumulator(kind, node.begin, node.end)
        else:
            info.max_end = max(info.max_end, node.end)


def resolve_view(
    root: NoteNode,
    document_ref: str,
    view: View,
    adapter: DocumentAdapter,
    tipping_point: float = -1.0,
    new_location: Location | None = None,
) -> ViewInfo:
    cmp_norm = adapter.convert_location
    closest_tipping_point = tipping_point if tipping_point >= 0 else None

    walk = _Walk()
    notes_in_view: list[list] = []  # [node, insert_before]
    all_after_tipping_point = True
    closest_notes: list[list] = []
    closest_location: Location | None = None

    reference: Reference | None = None
    reference_location: Location | None = None
    preamble = True

    def _narrow_last_note(notes: list[list], node: NoteNode) -> None:
        if notes:
            last = notes[-1]
            if last[1] is None and last[0].begin < node.begin < last[0].end:
                last[1] = node

    def _preamble_floor(node: NoteNode) -> None:
        nonlocal reference
        if preamble and new_location is not None and (
            reference is None or node.begin >= reference.node.end
        ):
            reference = Reference("after", node)

    for node, switched in iter_notes(root, document_ref):
        if switched:
            if walk.current is not None and walk.current.kind == "closest":
                _narrow_last_note(closest_notes, node)
            walk.finish(node)
            _narrow_last_note(notes_in_view, node)
            continue

        location = node.location
        if location is None:
            if walk.current is not None and node.begin >= walk.current.max_end:
                walk.finish()
            _preamble_floor(node)
            continue

        relative = adapter.relative_position(location, view)
        if relative == "inside":
            notes_in_view.append([node, None])
            walk.add("in-view", node)
            all_after_tipping_point = all_after_tipping_point and adapter.after_tipping_point(
                tipping_point, location, view
            )
        else:
            open_kind = walk.current.kind if walk.current is not None else None
            if open_kind == "in-view":
                walk.finish(node)
            _narrow_last_note(notes_in_view, node)
            if open_kind == "closest":
                _narrow_last_note(closest_notes, node)

            if closest_tipping_point is not None and all_after_tipping_point and relative == "before":
                if not closest_notes or compare(">", location, closest_location, cmp_norm):
                    closest_notes = [[node, None]]
                    closest_location = location
                    walk.current = None
                    walk.closest_regions = []
                    walk.add("closest", node)
                elif compare("=", location, closest_location, cmp_norm):
                    closest_notes.append([node, None])
                    walk.add("closest", node)
                else:
                    walk.finish(node)
            else:
                walk.finish(node)

        if new_location is not None:
            preamble = False
            if compare("<=", location, new_location, cmp_norm) and (
                (reference is not None and reference.side == "before")
                or compare(">=", location, reference_location, cmp_norm)
            ):
                reference = Reference("after", node)
                reference_location = location
            elif (
                reference is not None
                and reference.side == "after"
                and node.begin < reference.node.end
                and compare(">=", location, new_location, cmp_norm)
            ):
                reference = Reference("before", node)
                reference_location = location
            elif (
                reference is not None
                and reference.side == "before"
                and compare(">=", location, new_location, cmp_norm)
                and compare("<", location, reference_location, cmp_norm)
            ):
                reference = Reference("before", node)
                reference_location = location

    walk.finish()

    info = ViewInfo(
        regions=walk.regions,
        reference_for_insertion=reference,
        num_notes_in_view=len(notes_in_view),
    )
    pairs = [(node, before) for node, before in notes_in_view]
    if all_after_tipping_point and closest_notes:
        info.notes_in_view = [(node, before) for node, before in closest_notes] + pairs
        info.prev_regions = walk.closest_regions
    else:
        info.notes_in_view = pairs

    logger.debug(
        "View %s: %d in view, %d closest, %d regions, reference %s",
        view,
        info.num_notes_in_view,
        len(info.notes_in_view) - info.num_notes_in_view,
        len(info.regions),
        reference.side if reference else None,
    )
    return info

import re

from ..core.meta import PropertyBag
from ..core.model import NoteNode
from ..core.ports import ParserStrategy
from ..core.utils import slugify

HEADING_RE = re.compile(r"^(#+)[ \t]+(.*?)[ \t]*$")
FENCE_RE = re.compile(r"^(```|~~~)")
DRAWER_START_RE = re.compile(r"^[ \t]*:PROPERTIES:[ \t]*$", re.IGNORECASE)
DRAWER_END_RE = re.compile(r"^[ \t]*:END:[ \t]*$", re.IGNORECASE)
PROPERTY_RE = re.compile(r"^[ \t]*:([^:\s]+):(?:[ \t]+(.*?))?[ \t]*$")


def _read_drawer(lines: list[str], i: int) -> tuple[PropertyBag, int]:
    """
    Read a property drawer starting at lines[i].

    Returns the properties and the index of the first line after the drawer,
    or an empty bag and `i` when there is no well-formed drawer.
    """
    if i >= len(lines) or not DRAWER_START_RE.match(lines[i].rstrip("\r\n")):
        return PropertyBag(), i
    props = PropertyBag()
    j = i + 1
    while j < len(lines):
        ln = lines[j].rstrip("\r\n")
        if DRAWER_END_RE.match(ln):
            return props, j + 1
        m = PROPERTY_RE.match(ln)
        if not m:
            break
        props[m.group(1)] = m.group(2) or ""
        j += 1
    # Unterminated or malformed: treat as plain body text
    return PropertyBag(), i


class OutlineParser(ParserStrategy):
    def parse(self, text: str, start: int = 0) -> list[NoteNode]:
        lines = text[start:].splitlines(keepends=True)
        forest: list[NoteNode] = []
        stack: list[NoteNode] = []
        offset = start
        in_fence = False
        i = 0

        while i < len(lines):
            ln = lines[i]
            stripped = ln.rstrip("\r\n")

            if FENCE_RE.match(stripped):
                in_fence = not in_fence
            elif not in_fence:
                m = HEADING_RE.match(stripped)
                if m:
                    level = len(m.group(1))
                    title = m.group(2)
                    begin = offset

                    # Close every open heading of same or higher level
                    while stack and stack[-1].level >= level:
                        stack.pop().end = begin

                    props, after = _read_drawer(lines, i + 1)
                    drawer_len = sum(len(x) for x in lines[i + 1:after])
                    contents_begin = begin + len(ln) + drawer_len

                    node = NoteNode(
                        id=props.get_str("ID") or f"{slugify(title) or 'note'}-{begin}",
                        level=level,
                        title=title,
                        begin=begin,
                        end=len(text),
                        contents_begin=contents_begin,
                        properties=props,
                    )
                    (stack[-1].children if stack else forest).append(node)
                    stack.append(node)

                    offset = contents_begin
                    i = after
                    continue

            offset += len(ln)
            i += 1

        return forest

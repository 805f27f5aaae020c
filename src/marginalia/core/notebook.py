import logging
import re

from .meta import PropertyBag
from .model import NoteNode
from .ports import FrontmatterCodec, ParserStrategy, StorageStrategy

logger = logging.getLogger(__name__)

_DRAWER_END = re.compile(r"^[ \t]*:END:[ \t]*$", re.IGNORECASE | re.MULTILINE)


class Notebook:
    """
    The notes file a session writes into.

    Text is held in memory and reloaded lazily whenever the storage stamp
    moves. Every reload or edit bumps `stamp`, which is what parsed-tree
    caches key on.
    """

    def __init__(
        self, storage: StorageStrategy, parser: ParserStrategy, codec: FrontmatterCodec
    ):
        self.storage = storage
        self.parser = parser
        self.codec = codec
        self._text = ""
        self._stamp = 0
        self._loaded_from: int | None = None
        self._dirty = False
        self._closed = False
        self._reload()

    def _reload(self) -> None:
        raw = self.storage.read_raw()
        self._text = raw or ""
        self._loaded_from = self.storage.stamp()
        self._stamp += 1
        self._dirty = False

    def _sync(self) -> None:
        if not self._dirty and self.storage.stamp() != self._loaded_from:
            logger.debug("Notes file changed on storage, reloading")
            self._reload()

    @property
    def text(self) -> str:
        self._sync()
        return self._text

    @property
    def stamp(self) -> int:
        self._sync()
        return self._stamp

    def is_alive(self) -> bool:
        return not self._closed and (self._dirty or self.storage.exists())

    def close(self) -> None:
        self._closed = True

    def body_start(self) -> int:
        text = self.text
        _meta, body = self.codec.decode(text)
        return len(text) - len(body)

    def forest(self) -> list[NoteNode]:
        """Top-level headings of the file."""
        return self.parser.parse(self.text, self.body_start())

    def root(self) -> NoteNode:
        """A level-0 node spanning the whole outline."""
        start = self.body_start()
        return NoteNode(
            id="",
            level=0,
            title="",
            begin=start,
            end=len(self.text),
            contents_begin=start,
            properties=PropertyBag(),
            children=self.forest(),
        )

    # Editing

    def insert(self, offset: int, contents: str) -> None:
        text = self.text
        self._text = text[:offset] + contents + text[offset:]
        self._stamp += 1
        self._dirty = True

    def replace(self, begin: int, end: int, contents: str) -> None:
        text = self.text
        self._text = text[:begin] + contents + text[end:]
        self._stamp += 1
        self._dirty = True

    def heading_end(self, node: NoteNode) -> int:
        """Offset just past the heading line of `node`."""
        text = self.text
        nl = text.find("\n", node.begin)
        if nl == -1:
            return len(text)
        return nl + 1

    def set_property(self, node: NoteNode, name: str, value: str) -> None:
        line = f":{name.upper()}: {value}\n"
        text = self.text
        head_end = self.heading_end(node)
        drawer = text[head_end:node.contents_begin]
        if drawer.strip():
            pattern = re.compile(
                rf"^[ \t]*:{re.escape(name)}:.*\n?", re.IGNORECASE | re.MULTILINE
            )
            m = pattern.search(drawer)
            if m:
                self.replace(head_end + m.start(), head_end + m.end(), line)
            else:
                end = _DRAWER_END.search(drawer)
                if end is None:
                    raise ValueError(f"Malformed property drawer under {node.title!r}")
                self.insert(head_end + end.start(), line)
        else:
            prefix = "\n" if head_end == len(text) and not text.endswith("\n") else ""
            self.insert(head_end, prefix + ":PROPERTIES:\n" + line + ":END:\n")
        node.properties[name] = value

    def remove_property(self, node: NoteNode, name: str) -> None:
        if name not in node.properties:
            return
        head_end = self.heading_end(node)
        drawer = self.text[head_end:node.contents_begin]
        m = re.search(rf"^[ \t]*:{re.escape(name)}:.*\n?", drawer, re.IGNORECASE | re.MULTILINE)
        if m:
            self.replace(head_end + m.start(), head_end + m.end(), "")
        del node.properties[name]

    def save(self) -> None:
        self.storage.write_raw(self._text)
        self._loaded_from = self.storage.stamp()
        self._dirty = False

from pathlib import Path

from ..core.ports import StorageStrategy


class FsStorage(StorageStrategy):
    """A single notes file on disk."""

    def __init__(self, path: Path):
        self.path = path

    def read_raw(self) -> str | None:
        p = self.path
        return p.read_text(encoding="utf-8") if p.exists() else None

    def write_raw(self, contents: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(contents, encoding="utf-8")

    def exists(self) -> bool:
        return self.path.exists()

    def stamp(self) -> int | None:
        if not self.path.exists():
            return None
        return self.path.stat().st_mtime_ns


class MemoryStorage(StorageStrategy):
    """In-memory notes file, for the API and tests."""

    def __init__(self, contents: str = ""):
        self.contents: str | None = contents
        self._stamp = 0

    def read_raw(self) -> str | None:
        return self.contents

    def write_raw(self, contents: str) -> None:
        self.contents = contents
        self._stamp += 1

    def exists(self) -> bool:
        return self.contents is not None

    def stamp(self) -> int | None:
        return self._stamp if self.contents is not None else None

    def delete(self) -> None:
        self.contents = None

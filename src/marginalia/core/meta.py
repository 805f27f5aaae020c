from typing import Any, Iterator, MutableMapping

DISABLE = "disable"


class PropertyBag(MutableMapping[str, Any]):
    """
    Properties of one outline heading, as read from its drawer, e.g.
    - "NOTER_DOCUMENT": "books/sicp.pdf"
    - "NOTER_PAGE": "(3 . 0.5)"
    - "NOTER_HIDE_OTHER": "disable"
    Keys are upper-cased; values are kept as the raw drawer text.
    """

    def __init__(self, initial: dict | None = None):
        self._d = {k.upper(): v for k, v in (initial or {}).items()}

    # MutableMapping interface
    def __getitem__(self, k: str) -> Any:
        return self._d[k.upper()]

    def __setitem__(self, k: str, v: Any) -> None:
        self._d[k.upper()] = v

    def __delitem__(self, k: str) -> None:
        del self._d[k.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._d)

    def __len__(self) -> int:
        return len(self._d)

    def __contains__(self, k: object) -> bool:
        return isinstance(k, str) and k.upper() in self._d

    # Convenience
    def get_str(self, key: str, default: str | None = None) -> str | None:
        v = self._d.get(key.upper(), default)
        if isinstance(v, str) and v.strip():
            return v.strip()
        return default

"""Immutable, case-insensitive response headers.

Implements ``Mapping[str, str]`` plus ``get_list`` for multi-valued
headers. Stores the raw byte pairs captured from ``http.response.start``
and decodes on access.
"""

from collections.abc import Iterable, Iterator, Mapping


def _lookup_key(key: str) -> bytes | None:
    """Lowercased wire form of *key*, or ``None`` if no header can carry it."""
    try:
        return key.lower().encode("latin-1")
    except UnicodeEncodeError:
        return None


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header, in the order the
    application sent them.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        object.__setattr__(self, "_raw", tuple((bytes(k), bytes(v)) for k, v in raw))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "Headers":
        """Build headers from ``(name, value)`` string pairs."""
        return cls((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs)

    def __getitem__(self, key: str) -> str:
        values = self.get_raw_list(key)
        if not values:
            raise KeyError(key)
        return values[0].decode("latin-1")

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return bool(self.get_raw_list(key))

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self.get_list(k)!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (e.g. multiple ``Set-Cookie``)."""
        return [value.decode("latin-1") for value in self.get_raw_list(key)]

    def get_raw_list(self, key: str) -> list[bytes]:
        """Return all values for *key* as undecoded bytes.

        A name that cannot be encoded as Latin-1 matches nothing.
        """
        key_lower = _lookup_key(key)
        if key_lower is None:
            return []
        return [value for name, value in self._raw if name.lower() == key_lower]

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Access raw header byte pairs."""
        return self._raw

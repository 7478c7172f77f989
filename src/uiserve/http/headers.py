"""Immutable, case-insensitive HTTP request headers.

Built from the raw byte pairs of an ASGI scope. Names are lower-cased
and decoded once; repeated headers keep their arrival order so the
proxy can forward them as received.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


def _decode(raw: tuple[tuple[bytes, bytes], ...]) -> tuple[tuple[str, str], ...]:
    return tuple((name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw)


class Headers(Mapping[str, str]):
    """Request headers keyed by lower-cased name.

    Lookups return the first value; ``get_list`` returns every value
    (e.g. repeated ``X-Forwarded-For``).
    """

    __slots__ = ("_pairs", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw
        self._pairs = _decode(raw)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> Headers:
        """Build headers from ``(name, value)`` string pairs."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in pairs
            )
        )

    def get_list(self, key: str) -> list[str]:
        """Every value for *key*, in arrival order."""
        wanted = key.lower()
        return [value for name, value in self._pairs if name == wanted]

    def __getitem__(self, key: str) -> str:
        values = self.get_list(key)
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and bool(self.get_list(key))

    def __iter__(self) -> Iterator[str]:
        # dict.fromkeys keeps first-seen order and drops repeats
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len({name for name, _ in self._pairs})

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self.get_list(key)
        return values[0] if values else default

    def pairs(self) -> list[tuple[str, str]]:
        """Decoded ``(name, value)`` pairs, duplicates kept."""
        return list(self._pairs)

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The ASGI byte pairs this was built from."""
        return self._raw

"""Case-insensitive metadata bag attached to Results and Failures.

Metadata is an ordered, read-only mapping whose string keys compare
case-insensitively. Every "write" produces a new instance, so a Metadata
can be shared freely between Results.

Example:
    ```python
    meta = Metadata({'TraceId': 'abc'})
    meta['traceid']
    # 'abc'
    meta.merge(traceId='def')['TRACEID']
    # 'def'
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, ClassVar

__all__ = ['Metadata', 'MetadataBuilder', 'MetadataSource']

MetadataSource = Mapping[str, Any] | Iterable[tuple[str, Any]]
"""Anything that can be folded into a Metadata: a mapping or (key, value) pairs."""


def _fold(data: dict[str, tuple[str, Any]], source: MetadataSource) -> None:
    items = source.items() if isinstance(source, Mapping) else source
    for key, value in items:
        _set(data, key, value)


def _set(data: dict[str, tuple[str, Any]], key: str, value: Any) -> None:
    if not isinstance(key, str):
        raise TypeError(f'Metadata keys must be str, got {type(key).__name__}')
    folded = key.casefold()
    existing = data.get(folded)
    # First spelling of a key is kept, the value is replaced.
    data[folded] = (existing[0] if existing is not None else key, value)


class Metadata(Mapping[str, Any]):
    """Ordered, read-only, case-insensitive string-keyed mapping.

    Sources are applied left to right, then keyword entries; later writes
    win on key collision. Lookups, membership tests and equality ignore key
    case. The first spelling of a key is the one reported by iteration.

    Attributes:
        EMPTY: Shared empty instance, the default for every Result.
    """

    __slots__ = ('_data',)

    EMPTY: ClassVar[Metadata]

    def __init__(self, *sources: MetadataSource, **entries: Any) -> None:
        data: dict[str, tuple[str, Any]] = {}
        for source in sources:
            _fold(data, source)
        _fold(data, entries)
        self._data = data

    def __getitem__(self, key: str) -> Any:
        if not isinstance(key, str):
            raise KeyError(key)
        try:
            return self._data[key.casefold()][1]
        except KeyError:
            raise KeyError(key) from None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._data

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Metadata):
            return self._folded() == other._folded()
        if isinstance(other, Mapping):
            if not all(isinstance(key, str) for key in other):
                return False
            return self._folded() == Metadata(other)._folded()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._folded().items()))

    def __repr__(self) -> str:
        return f'Metadata({dict(self.items())!r})'

    def __str__(self) -> str:
        return self.to_string()

    def _folded(self) -> dict[str, Any]:
        return {folded: value for folded, (_, value) in self._data.items()}

    def contains_key(self, key: str) -> bool:
        """Return True if the key is present, ignoring case."""
        return key in self

    def merge(self, *sources: MetadataSource, **entries: Any) -> Metadata:
        """Return a new Metadata with the given entries written on top of this one."""
        if not sources and not entries:
            return self
        return Metadata(self, *sources, **entries)

    def to_string(self, take: int | None = None) -> str:
        """Render as ``key:value`` pairs joined by commas.

        Args:
            take: Render at most this many entries. ``None`` renders all of
                them; zero or a negative number renders nothing.
        """
        if take is not None and take <= 0:
            return ''
        items = list(self.items())
        if take is not None:
            items = items[:take]
        return ','.join(f'{key}:{"null" if value is None else value}' for key, value in items)

    @classmethod
    def merged(cls, *sources: MetadataSource) -> Metadata:
        """Merge several sources into one Metadata, later sources winning."""
        return cls(*sources)


Metadata.EMPTY = Metadata()


class MetadataBuilder:
    """Fluent builder producing a Metadata.

    Example:
        ```python
        meta = (
            MetadataBuilder()
            .add('traceId', 'abc')
            .add_if(lambda: debug, 'query', sql)
            .build()
        )
        ```
    """

    __slots__ = ('_data',)

    def __init__(self, initial: MetadataSource | None = None) -> None:
        self._data: dict[str, tuple[str, Any]] = {}
        if initial is not None:
            _fold(self._data, initial)

    def add(self, key: str, value: Any) -> MetadataBuilder:
        _set(self._data, key, value)
        return self

    def add_if(self, condition: bool | Callable[[], bool], key: str, value: Any) -> MetadataBuilder:
        """Add the entry only when the condition (or the condition callable) holds."""
        holds = condition() if callable(condition) else condition
        if holds:
            _set(self._data, key, value)
        return self

    def add_range(self, *sources: MetadataSource, **entries: Any) -> MetadataBuilder:
        for source in sources:
            _fold(self._data, source)
        _fold(self._data, entries)
        return self

    def remove(self, key: str) -> MetadataBuilder:
        self._data.pop(key.casefold(), None)
        return self

    def clear(self) -> MetadataBuilder:
        self._data.clear()
        return self

    def build(self) -> Metadata:
        if not self._data:
            return Metadata.EMPTY
        metadata = Metadata()
        metadata._data = dict(self._data)
        return metadata

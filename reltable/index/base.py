from __future__ import annotations

import bisect
from typing import Any, Dict, Iterator, List, Optional, Tuple

NONE = "none"
HASH = "hash"
ORDERED = "ordered"
BTREE = "btree"

INDEX_KINDS = (NONE, HASH, ORDERED, BTREE)

KeyValue = Tuple[Any, ...]
Row = Tuple[Any, ...]


def normalize_index_kind(kind: str | None) -> str:
    if kind is None:
        return NONE
    normalized = str(kind).strip().lower()
    if normalized not in INDEX_KINDS:
        raise ValueError(f"Unsupported index kind: {kind}")
    return normalized


class KeyIndex:
    """Maps a primary-key tuple to the tuple stored under it.

    A later insert under an existing key replaces the earlier entry.
    """

    kind = NONE
    enabled = True

    def lookup(self, key: KeyValue) -> Optional[Row]:
        raise NotImplementedError

    def insert(self, key: KeyValue, row: Row) -> None:
        raise NotImplementedError

    def items(self) -> List[Tuple[KeyValue, Row]]:
        """Entries sorted by key."""
        raise NotImplementedError

    def __len__(self) -> int:
        return len(self.items())

    def __iter__(self) -> Iterator[Tuple[KeyValue, Row]]:
        return iter(self.items())


class NoIndex(KeyIndex):
    kind = NONE
    enabled = False

    def lookup(self, key: KeyValue) -> Optional[Row]:
        return None

    def insert(self, key: KeyValue, row: Row) -> None:
        return None

    def items(self) -> List[Tuple[KeyValue, Row]]:
        return []


class HashIndex(KeyIndex):
    kind = HASH

    def __init__(self) -> None:
        self._entries: Dict[KeyValue, Row] = {}

    def lookup(self, key: KeyValue) -> Optional[Row]:
        return self._entries.get(key)

    def insert(self, key: KeyValue, row: Row) -> None:
        self._entries[key] = row

    def items(self) -> List[Tuple[KeyValue, Row]]:
        return sorted(self._entries.items(), key=lambda item: item[0])

    def __len__(self) -> int:
        return len(self._entries)


class OrderedIndex(KeyIndex):
    """Sorted key list searched with bisect, the tree-map flavour."""

    kind = ORDERED

    def __init__(self) -> None:
        self._keys: List[KeyValue] = []
        self._rows: List[Row] = []

    def lookup(self, key: KeyValue) -> Optional[Row]:
        i = bisect.bisect_left(self._keys, key)
        if i < len(self._keys) and self._keys[i] == key:
            return self._rows[i]
        return None

    def insert(self, key: KeyValue, row: Row) -> None:
        i = bisect.bisect_left(self._keys, key)
        if i < len(self._keys) and self._keys[i] == key:
            self._rows[i] = row
            return
        self._keys.insert(i, key)
        self._rows.insert(i, row)

    def items(self) -> List[Tuple[KeyValue, Row]]:
        return list(zip(self._keys, self._rows))

    def __len__(self) -> int:
        return len(self._keys)


def make_index(kind: str | None) -> KeyIndex:
    normalized = normalize_index_kind(kind)
    if normalized == HASH:
        return HashIndex()
    if normalized == ORDERED:
        return OrderedIndex()
    if normalized == BTREE:
        from reltable.index.btree import BTreeIndex

        return BTreeIndex()
    return NoIndex()

from .base import (
    BTREE,
    HASH,
    INDEX_KINDS,
    NONE,
    ORDERED,
    HashIndex,
    KeyIndex,
    NoIndex,
    OrderedIndex,
    make_index,
    normalize_index_kind,
)
from .btree import BTreeIndex

__all__ = [
    "BTREE",
    "HASH",
    "INDEX_KINDS",
    "NONE",
    "ORDERED",
    "BTreeIndex",
    "HashIndex",
    "KeyIndex",
    "NoIndex",
    "OrderedIndex",
    "make_index",
    "normalize_index_kind",
]

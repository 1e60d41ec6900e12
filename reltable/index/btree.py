from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from reltable.index.base import BTREE, KeyIndex, KeyValue, Row

MAX_KEYS_PER_NODE = 16


@dataclass
class Node:
    is_leaf: bool
    keys: List[Any] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    values: List[Row] = field(default_factory=list)


class BTreeIndex(KeyIndex):
    """A small in-memory B+-tree keyed by primary-key tuples.

    Leaves hold the entries; inner nodes hold separator keys where each
    separator is the first key of the child to its right. Nodes split once they
    reach ``max_keys`` entries, so the tree stays balanced under any insert order.
    """

    kind = BTREE

    def __init__(self, max_keys: int = MAX_KEYS_PER_NODE):
        if max_keys < 3:
            raise ValueError("max_keys must be at least 3")
        self.max_keys = max_keys
        self.root = Node(is_leaf=True)
        self._size = 0

    def lookup(self, key: KeyValue) -> Optional[Row]:
        node = self.root
        while not node.is_leaf:
            node = node.children[bisect.bisect_right(node.keys, key)]
        i = bisect.bisect_left(node.keys, key)
        if i < len(node.keys) and node.keys[i] == key:
            return node.values[i]
        return None

    def insert(self, key: KeyValue, row: Row) -> None:
        if len(self.root.keys) >= self.max_keys:
            new_root = Node(is_leaf=False, children=[self.root])
            self._split_child(new_root, 0)
            self.root = new_root
        self._insert_non_full(self.root, key, row)

    def items(self) -> List[Tuple[KeyValue, Row]]:
        out: List[Tuple[KeyValue, Row]] = []
        self._collect(self.root, out)
        return out

    def height(self) -> int:
        depth = 1
        node = self.root
        while not node.is_leaf:
            node = node.children[0]
            depth += 1
        return depth

    def __len__(self) -> int:
        return self._size

    def _collect(self, node: Node, out: List[Tuple[KeyValue, Row]]) -> None:
        if node.is_leaf:
            out.extend(zip(node.keys, node.values))
            return
        for child in node.children:
            self._collect(child, out)

    def _insert_non_full(self, node: Node, key: KeyValue, row: Row) -> None:
        if node.is_leaf:
            idx = bisect.bisect_left(node.keys, key)
            if idx < len(node.keys) and node.keys[idx] == key:
                node.values[idx] = row
                return
            node.keys.insert(idx, key)
            node.values.insert(idx, row)
            self._size += 1
            return

        idx = bisect.bisect_right(node.keys, key)
        if len(node.children[idx].keys) >= self.max_keys:
            self._split_child(node, idx)
            if key >= node.keys[idx]:
                idx += 1
        self._insert_non_full(node.children[idx], key, row)

    def _split_child(self, parent: Node, child_index: int) -> None:
        child = parent.children[child_index]
        mid = len(child.keys) // 2
        median_key = child.keys[mid]

        if child.is_leaf:
            right = Node(is_leaf=True, keys=child.keys[mid:], values=child.values[mid:])
            child.keys = child.keys[:mid]
            child.values = child.values[:mid]
        else:
            right = Node(
                is_leaf=False,
                keys=child.keys[mid + 1 :],
                children=child.children[mid + 1 :],
            )
            child.keys = child.keys[:mid]
            child.children = child.children[: mid + 1]

        parent.keys.insert(child_index, median_key)
        parent.children.insert(child_index + 1, right)

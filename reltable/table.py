from __future__ import annotations

import itertools
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from reltable.config import get_config
from reltable.display import format_index, format_table
from reltable.errors import (
    ArityMismatch,
    KeyLookupFailure,
    PersistenceFailure,
    SchemaError,
    SchemaIncompatible,
    TableError,
    TypeMismatch,
    UnknownAttribute,
)
from reltable.index.base import KeyIndex, make_index, normalize_index_kind
from reltable.schema import (
    Attribute,
    Row,
    Schema,
    deserialize_schema,
    extract,
    serialize_schema,
    split_names,
)
from reltable.storage.snapshot import read_snapshot, snapshot_path, write_snapshot

logger = logging.getLogger(__name__)

Predicate = Callable[[Row], Any]

# Suffix appended to right-hand attribute names that collide in an equi-join.
DISAMBIGUATION_SUFFIX = "2"

_temp_counter = itertools.count()


def _derived_name(base: str) -> str:
    return f"{base}{next(_temp_counter)}"


def _disambiguate(name: str, taken: set[str]) -> str:
    while name in taken:
        name += DISAMBIGUATION_SUFFIX
    return name


class Table:
    """An in-memory relation: a schema, a primary key and an ordered list of tuples.

    Every relational operator returns a new ``Table`` and leaves its inputs
    untouched. ``insert`` is the only mutator.

    #usage
        movie = Table.from_strings("movie", "title year length genre studioName producerNo",
                                   "String Integer Integer String String Integer", "title year")
        movie.insert(("Star_Wars", 1977, 124, "sciFi", "Fox", 12345))
        movie.project("title year").print()
    """

    def __init__(
        self,
        name: str,
        attributes: str | Sequence[str],
        domains: str | Sequence[str],
        key: str | Sequence[str],
        tuples: Iterable[Sequence[Any]] | None = None,
        index_kind: str | None = None,
    ):
        schema = Schema.build(split_names(attributes), split_names(domains), split_names(key))
        rows: List[Row] = []
        for values in tuples or []:
            row = tuple(values)
            schema.type_check(row)
            rows.append(row)
        self._setup(name, schema, rows, index_kind)
        logger.info("DDL> create table %s (%s)", name, " ".join(schema.names))

    @classmethod
    def from_strings(
        cls,
        name: str,
        attributes: str,
        domains: str,
        key: str,
        tuples: Iterable[Sequence[Any]] | None = None,
        index_kind: str | None = None,
    ) -> "Table":
        return cls(name, attributes.split(), domains.split(), key.split(), tuples, index_kind)

    @classmethod
    def _derive(cls, name: str, schema: Schema, rows: List[Row], index_kind: str) -> "Table":
        table = cls.__new__(cls)
        table._setup(name, schema, rows, index_kind)
        return table

    def _setup(self, name: str, schema: Schema, rows: List[Row], index_kind: str | None) -> None:
        self.name = name
        self.schema = schema
        self._tuples: List[Row] = rows
        if index_kind is None:
            index_kind = get_config().index_kind
        self._index: KeyIndex = make_index(normalize_index_kind(index_kind))
        self._lock = threading.Lock()
        if self._index.enabled:
            positions = schema.key_positions()
            for row in rows:
                self._index.insert(extract(row, positions), row)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def attributes(self) -> List[str]:
        return self.schema.names

    @property
    def domains(self) -> List[str]:
        return self.schema.domains

    @property
    def key(self) -> List[str]:
        return list(self.schema.key)

    @property
    def index_kind(self) -> str:
        return self._index.kind

    @property
    def tuples(self) -> List[Row]:
        return list(self._tuples)

    def column_index(self, name: str) -> int:
        return self.schema.column_index(name)

    col = column_index

    def tuple_count(self) -> int:
        return len(self._tuples)

    def tuple_at(self, i: int) -> Row:
        return self._tuples[i]

    def index_entries(self) -> List[Tuple[Row, Row]]:
        return self._index.items()

    def __len__(self) -> int:
        return len(self._tuples)

    def __iter__(self):
        return iter(list(self._tuples))

    def __repr__(self) -> str:
        return f"Table({self.name!r}, {self.attributes!r}, key={self.key!r}, tuples={len(self._tuples)})"

    # ------------------------------------------------------------------
    # Relational algebra
    # ------------------------------------------------------------------

    def project(self, attributes: str | Sequence[str]) -> "Table":
        """Keep only the given attributes, in the order requested.

        Unknown names are reported and skipped. The key survives when all of its
        attributes are kept; otherwise the requested attributes become the key.
        Duplicate result tuples are not removed.

        #usage movie.project("title year studioNo")
        """
        requested = split_names(attributes)
        logger.info("RA> %s.project (%s)", self.name, " ".join(requested))

        kept: List[str] = []
        for attr in requested:
            if not self.schema.has(attr):
                logger.warning("project: %s", UnknownAttribute(attr, self.name))
                continue
            if attr in kept:
                logger.warning("project: attribute '%s' requested more than once", attr)
                continue
            kept.append(attr)

        positions = self.schema.column_positions(kept)
        domains = self.schema.extract_domains(positions)
        key = self.schema.key if all(k in kept for k in self.schema.key) else tuple(kept)
        schema = Schema(tuple(Attribute(n, d) for n, d in zip(kept, domains)), key)

        rows = [extract(row, positions) for row in self._tuples]
        return self._derive(_derived_name(self.name), schema, rows, self.index_kind)

    def select(self, predicate: Predicate) -> "Table":
        """Keep the tuples for which ``predicate`` holds.

        #usage movie.select(lambda t: t[movie.col("year")] == 1977)
        """
        label = getattr(predicate, "__name__", repr(predicate))
        logger.info("RA> %s.select (%s)", self.name, label)
        rows = [row for row in self._tuples if predicate(row)]
        return self._derive(_derived_name(self.name), self.schema, rows, self.index_kind)

    def select_key(self, key_value: Any) -> "Table":
        """Select the tuple whose primary key equals ``key_value``.

        A scalar is accepted for single-attribute keys. Uses the index when the
        table has one and a scan over the key columns otherwise. A malformed key
        is reported and yields an empty table.
        """
        logger.info("RA> %s.select (%s)", self.name, key_value)
        rows: List[Row] = []
        try:
            key = self._normalize_key(key_value)
            if self._index.enabled:
                found = self._index.lookup(key)
                if found is not None:
                    rows.append(found)
            else:
                positions = self.schema.key_positions()
                rows = [row for row in self._tuples if extract(row, positions) == key]
        except (KeyLookupFailure, TypeError) as exc:
            logger.error("select: key lookup on %s failed: %s", self.name, exc)
            rows = []
        return self._derive(_derived_name(self.name), self.schema, rows, self.index_kind)

    def union(self, table2: "Table") -> Optional["Table"]:
        """Every tuple of this table followed by the tuples of ``table2`` it lacks.

        Duplicates are only suppressed against this table; repeated tuples
        within ``table2`` are all kept. Returns ``None`` for incompatible tables.

        #usage movie.union(cinema)
        """
        logger.info("RA> %s.union (%s)", self.name, table2.name)
        if not self._check_compatible(table2):
            return None

        present = set(self._tuples)
        rows = list(self._tuples)
        rows.extend(row for row in table2._tuples if row not in present)
        return self._derive(_derived_name(self.name), self.schema, rows, self.index_kind)

    def minus(self, table2: "Table") -> Optional["Table"]:
        """Tuples of this table that do not appear in ``table2``.

        #usage movie.minus(cinema)
        """
        logger.info("RA> %s.minus (%s)", self.name, table2.name)
        if not self._check_compatible(table2):
            return None

        other = set(table2._tuples)
        rows = [row for row in self._tuples if row not in other]
        return self._derive(_derived_name(self.name), self.schema, rows, self.index_kind)

    def join(
        self,
        attributes1: str | Sequence[str],
        attributes2: str | Sequence[str],
        table2: "Table",
    ) -> Optional["Table"]:
        """Nested-loop equi-join requiring ``attributes1`` to equal ``attributes2``.

        Right-hand attribute names that clash with this table's are suffixed with
        "2" in the result only. Returns ``None`` when the attribute lists are
        unusable.

        #usage movie.join("studioName", "name", studio)
        """
        return self._equi_join("join", attributes1, attributes2, table2, self._nested_loop_rows)

    def hash_join(
        self,
        attributes1: str | Sequence[str],
        attributes2: str | Sequence[str],
        table2: "Table",
    ) -> Optional["Table"]:
        """Same result as :meth:`join`, computed by hashing ``table2`` on its join columns."""
        return self._equi_join("hash_join", attributes1, attributes2, table2, self._hash_rows)

    def index_join(
        self,
        attributes1: str | Sequence[str],
        attributes2: str | Sequence[str],
        table2: "Table",
    ) -> Optional["Table"]:
        """Same result as :meth:`join`, probing ``table2``'s key index.

        Applies when ``attributes2`` names exactly the primary key of an indexed
        ``table2``; falls back to a hash join otherwise.
        """
        return self._equi_join("index_join", attributes1, attributes2, table2, self._index_rows)

    def natural_join(self, table2: "Table") -> "Table":
        """Join on every attribute name the two tables share, keeping one copy of each.

        With no shared attributes this is a Cartesian product.

        #usage movieStar.natural_join(starsIn)
        """
        logger.info("RA> %s.join (%s)", self.name, table2.name)
        shared = [name for name in table2.attributes if self.schema.has(name)]
        exclusive = [name for name in table2.attributes if not self.schema.has(name)]
        logger.debug("natural join shared=%s exclusive=%s", shared, exclusive)

        left_pos = self.schema.column_positions(shared)
        right_pos = table2.schema.column_positions(shared)
        excl_pos = table2.schema.column_positions(exclusive)

        rows: List[Row] = []
        for left in self._tuples:
            left_key = extract(left, left_pos)
            for right in table2._tuples:
                if left_key == extract(right, right_pos):
                    rows.append(left + extract(right, excl_pos))

        extra = [table2.schema.attributes[pos] for pos in excl_pos]
        schema = Schema(self.schema.attributes + tuple(extra), self.schema.key)
        return self._derive(_derived_name(self.name), schema, rows, self.index_kind)

    # ------------------------------------------------------------------
    # Data manipulation
    # ------------------------------------------------------------------

    def insert(self, values: Sequence[Any]) -> bool:
        """Append a tuple after checking its arity and domains.

        #usage movie.insert(("Star_Wars", 1977, 124, "sciFi", "Fox", 12345))
        """
        row = tuple(values)
        logger.info("DML> insert into %s values ( %s )", self.name, ", ".join(map(repr, row)))
        try:
            self.schema.type_check(row)
        except (ArityMismatch, TypeMismatch) as exc:
            logger.error("insert into %s rejected: %s", self.name, exc)
            return False

        with self._lock:
            self._tuples.append(row)
            if self._index.enabled:
                self._index.insert(self.schema.key_of(row), row)
        return True

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def render(self) -> str:
        return format_table(self)

    def render_index(self) -> str:
        return format_index(self.name, self._index.items(), self.index_kind)

    def print(self) -> None:
        print(self.render())

    def print_index(self) -> None:
        print(self.render_index())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        payload = serialize_schema(self.schema)
        payload.update(
            {
                "name": self.name,
                "index_kind": self.index_kind,
                "tuples": [list(row) for row in self._tuples],
            }
        )
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Table":
        try:
            schema = deserialize_schema(payload)
            index_kind = payload.get("index_kind")
            if index_kind is not None:
                index_kind = normalize_index_kind(index_kind)
        except (AttributeError, TypeError, ValueError) as exc:
            raise PersistenceFailure(f"Invalid table header: {exc}") from exc
        rows: List[Row] = []
        for values in payload["tuples"]:
            row = tuple(values)
            schema.type_check(row)
            rows.append(row)
        return cls._derive(str(payload["name"]), schema, rows, index_kind)

    def save(self, store_dir: str | Path | None = None) -> Optional[Path]:
        """Write this table to ``<store_dir>/<name><ext>``; ``None`` on failure."""
        path: Path | str = self.name
        try:
            path = snapshot_path(self.name, store_dir)
            write_snapshot(path, self.to_payload())
        except (OSError, PersistenceFailure) as exc:
            logger.error("save: could not write %s: %s", path, exc)
            return None
        logger.info("save: wrote %s (%d tuples)", path, len(self._tuples))
        return path

    @classmethod
    def load(cls, name: str, store_dir: str | Path | None = None) -> Optional["Table"]:
        """Read the table saved under ``name``; ``None`` on failure."""
        path: Path | str = name
        try:
            path = snapshot_path(name, store_dir)
            table = cls.from_payload(read_snapshot(path))
        except (OSError, KeyError, TypeError, TableError) as exc:
            logger.error("load: could not read %s: %s", path, exc)
            return None
        logger.info("load: read %s (%d tuples)", path, len(table))
        return table

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_compatible(self, table2: "Table") -> bool:
        try:
            self.schema.check_compatible(table2.schema)
        except SchemaIncompatible as exc:
            logger.error("compatible: %s and %s: %s", self.name, table2.name, exc)
            return False
        return True

    def _normalize_key(self, key_value: Any) -> Row:
        if isinstance(key_value, (tuple, list)):
            key = tuple(key_value)
        else:
            key = (key_value,)
        if len(key) != len(self.schema.key):
            raise KeyLookupFailure(
                f"Key {key_value!r} has {len(key)} values, primary key {list(self.schema.key)} needs {len(self.schema.key)}"
            )
        if any(value is None for value in key):
            raise KeyLookupFailure(f"Key {key_value!r} contains a null value")
        return key

    def _equi_join(
        self,
        op_name: str,
        attributes1: str | Sequence[str],
        attributes2: str | Sequence[str],
        table2: "Table",
        strategy: Callable[[List[int], List[int], "Table"], List[Row]],
    ) -> Optional["Table"]:
        names1 = split_names(attributes1)
        names2 = split_names(attributes2)
        logger.info(
            "RA> %s.%s (%s, %s, %s)",
            self.name,
            op_name,
            " ".join(names1),
            " ".join(names2),
            table2.name,
        )
        try:
            if len(names1) != len(names2):
                raise SchemaError(
                    f"Join attribute lists differ in length ({len(names1)} vs {len(names2)})"
                )
            left_pos = self._positions_in(self, names1)
            right_pos = self._positions_in(table2, names2)
        except TableError as exc:
            logger.error("%s: %s", op_name, exc)
            return None

        rows = strategy(left_pos, right_pos, table2)
        return self._derive(_derived_name(self.name), self._joined_schema(table2), rows, self.index_kind)

    @staticmethod
    def _positions_in(table: "Table", names: Sequence[str]) -> List[int]:
        try:
            return table.schema.column_positions(names)
        except UnknownAttribute as exc:
            raise UnknownAttribute(exc.name, table.name) from exc

    def _joined_schema(self, table2: "Table") -> Schema:
        taken = set(self.attributes)
        right: List[Attribute] = []
        for attr in table2.schema.attributes:
            name = _disambiguate(attr.name, taken)
            taken.add(name)
            right.append(Attribute(name, attr.domain))
        return Schema(self.schema.attributes + tuple(right), self.schema.key)

    def _nested_loop_rows(self, left_pos: List[int], right_pos: List[int], table2: "Table") -> List[Row]:
        rows: List[Row] = []
        for left in self._tuples:
            left_key = extract(left, left_pos)
            for right in table2._tuples:
                if left_key == extract(right, right_pos):
                    rows.append(left + right)
        return rows

    def _hash_rows(self, left_pos: List[int], right_pos: List[int], table2: "Table") -> List[Row]:
        buckets: Dict[Row, List[Row]] = {}
        for right in table2._tuples:
            buckets.setdefault(extract(right, right_pos), []).append(right)

        rows: List[Row] = []
        for left in self._tuples:
            for right in buckets.get(extract(left, left_pos), []):
                rows.append(left + right)
        return rows

    def _index_rows(self, left_pos: List[int], right_pos: List[int], table2: "Table") -> List[Row]:
        key_pos = table2.schema.key_positions()
        usable = table2._index.enabled and sorted(right_pos) == sorted(key_pos)
        if usable:
            # Line the lookup columns up with the order of table2's key.
            lookup_pos = [left_pos[right_pos.index(pos)] for pos in key_pos]
            usable = self.schema.extract_domains(lookup_pos) == table2.schema.extract_domains(key_pos)
        if not usable:
            logger.debug("index_join: %s has no usable key index, using hash join", table2.name)
            return self._hash_rows(left_pos, right_pos, table2)

        rows: List[Row] = []
        for left in self._tuples:
            right = table2._index.lookup(extract(left, lookup_pos))
            if right is not None:
                rows.append(left + right)
        return rows

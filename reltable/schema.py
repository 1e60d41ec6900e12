from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from reltable.errors import (
    ArityMismatch,
    SchemaError,
    SchemaIncompatible,
    TypeMismatch,
    UnknownAttribute,
    UnknownDomain,
)

INTEGER = "INTEGER"
REAL = "REAL"
TEXT = "TEXT"
CHARACTER = "CHARACTER"

SUPPORTED_DOMAINS = (INTEGER, REAL, TEXT, CHARACTER)

# Lower-cased aliases, including the class names the original driver scripts use.
DOMAIN_ALIASES = {
    "integer": INTEGER,
    "int": INTEGER,
    "long": INTEGER,
    "short": INTEGER,
    "byte": INTEGER,
    "real": REAL,
    "double": REAL,
    "float": REAL,
    "text": TEXT,
    "string": TEXT,
    "str": TEXT,
    "character": CHARACTER,
    "char": CHARACTER,
}

Row = Tuple[Any, ...]


def normalize_domain(domain_name: str) -> str:
    if not isinstance(domain_name, str):
        raise UnknownDomain(f"Unsupported domain: {domain_name!r}")
    normalized = DOMAIN_ALIASES.get(domain_name.strip().lower())
    if normalized is None:
        raise UnknownDomain(f"Unsupported domain: {domain_name}")
    return normalized


def conforms(value: Any, domain: str) -> bool:
    if value is None:
        return False
    if domain == INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if domain == REAL:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if domain == TEXT:
        return isinstance(value, str)
    if domain == CHARACTER:
        return isinstance(value, str) and len(value) == 1
    raise UnknownDomain(f"Unsupported domain: {domain}")


def split_names(names: str | Iterable[str]) -> List[str]:
    """Accept ``"title year"`` as well as ``["title", "year"]``."""
    if isinstance(names, str):
        return names.split()
    return [str(name) for name in names]


def extract(row: Sequence[Any], positions: Sequence[int]) -> Row:
    return tuple(row[pos] for pos in positions)


@dataclass(frozen=True)
class Attribute:
    name: str
    domain: str


@dataclass(frozen=True)
class Schema:
    attributes: Tuple[Attribute, ...]
    key: Tuple[str, ...]
    _positions: Dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", tuple(self.attributes))
        object.__setattr__(self, "key", tuple(self.key))
        positions: Dict[str, int] = {}
        for idx, attr in enumerate(self.attributes):
            if attr.domain not in SUPPORTED_DOMAINS:
                raise UnknownDomain(f"Unsupported domain: {attr.domain}")
            if attr.name in positions:
                raise SchemaError(f"Duplicate attribute name '{attr.name}'")
            positions[attr.name] = idx
        if self.attributes and not self.key:
            raise SchemaError("Primary key cannot be empty")
        for name in self.key:
            if name not in positions:
                raise SchemaError(f"Key attribute '{name}' is not in the schema")
        object.__setattr__(self, "_positions", positions)

    @classmethod
    def build(cls, names: Sequence[str], domains: Sequence[str], key: Sequence[str]) -> "Schema":
        if len(names) != len(domains):
            raise SchemaError(
                f"Attribute/domain count mismatch: {len(names)} names, {len(domains)} domains"
            )
        attributes = [Attribute(name, normalize_domain(domain)) for name, domain in zip(names, domains)]
        return cls(tuple(attributes), tuple(key))

    @property
    def names(self) -> List[str]:
        return [attr.name for attr in self.attributes]

    @property
    def domains(self) -> List[str]:
        return [attr.domain for attr in self.attributes]

    @property
    def arity(self) -> int:
        return len(self.attributes)

    def column_index(self, name: str) -> int:
        return self._positions.get(name, -1)

    def has(self, name: str) -> bool:
        return name in self._positions

    def column_positions(self, names: Sequence[str]) -> List[int]:
        out: List[int] = []
        for name in names:
            pos = self._positions.get(name)
            if pos is None:
                raise UnknownAttribute(name)
            out.append(pos)
        return out

    def extract_domains(self, positions: Sequence[int]) -> List[str]:
        return [self.attributes[pos].domain for pos in positions]

    def key_positions(self) -> List[int]:
        return self.column_positions(self.key)

    def key_of(self, row: Sequence[Any]) -> Row:
        return extract(row, self.key_positions())

    def compatible(self, other: "Schema") -> bool:
        try:
            self.check_compatible(other)
        except SchemaIncompatible:
            return False
        return True

    def check_compatible(self, other: "Schema") -> None:
        # Names and keys may differ; only arity and the domain sequence matter.
        if self.arity != other.arity:
            raise SchemaIncompatible(f"Tables have different arity ({self.arity} vs {other.arity})")
        for idx, (mine, theirs) in enumerate(zip(self.domains, other.domains)):
            if mine != theirs:
                raise SchemaIncompatible(f"Tables disagree on domain {idx} ({mine} vs {theirs})")

    def type_check(self, values: Sequence[Any]) -> None:
        if len(values) != self.arity:
            raise ArityMismatch(f"Expected {self.arity} values, got {len(values)}")
        for attr, value in zip(self.attributes, values):
            if not conforms(value, attr.domain):
                raise TypeMismatch(
                    f"Value {value!r} for '{attr.name}' does not conform to domain {attr.domain}"
                )


def serialize_schema(schema: Schema) -> Dict[str, Any]:
    return {
        "attributes": schema.names,
        "domains": schema.domains,
        "key": list(schema.key),
    }


def deserialize_schema(payload: Dict[str, Any]) -> Schema:
    return Schema.build(
        list(payload["attributes"]),
        list(payload["domains"]),
        list(payload["key"]),
    )

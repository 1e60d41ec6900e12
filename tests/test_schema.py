import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reltable.errors import (
    ArityMismatch,
    SchemaError,
    SchemaIncompatible,
    TypeMismatch,
    UnknownAttribute,
    UnknownDomain,
)
from reltable.schema import (
    CHARACTER,
    INTEGER,
    REAL,
    TEXT,
    Schema,
    conforms,
    deserialize_schema,
    extract,
    normalize_domain,
    serialize_schema,
    split_names,
)


def test_normalize_domain_accepts_class_names_and_canonical_names():
    assert normalize_domain("Integer") == INTEGER
    assert normalize_domain("Long") == INTEGER
    assert normalize_domain("Double") == REAL
    assert normalize_domain("float") == REAL
    assert normalize_domain("String") == TEXT
    assert normalize_domain("Character") == CHARACTER
    assert normalize_domain("TEXT") == TEXT

    with pytest.raises(UnknownDomain):
        normalize_domain("Date")
    with pytest.raises(UnknownDomain):
        normalize_domain(1)


def test_conforms_per_domain():
    assert conforms(3, INTEGER)
    assert not conforms(True, INTEGER)
    assert not conforms(3.0, INTEGER)
    assert conforms(3.5, REAL)
    assert conforms(3, REAL)
    assert conforms("abc", TEXT)
    assert not conforms(1, TEXT)
    assert conforms("M", CHARACTER)
    assert not conforms("MF", CHARACTER)
    assert not conforms(None, TEXT)


def test_build_validates_shape_and_key():
    with pytest.raises(SchemaError):
        Schema.build(["a", "b"], ["Integer"], ["a"])
    with pytest.raises(SchemaError):
        Schema.build(["a", "a"], ["Integer", "Integer"], ["a"])
    with pytest.raises(SchemaError):
        Schema.build(["a"], ["Integer"], ["b"])
    with pytest.raises(SchemaError):
        Schema.build(["a"], ["Integer"], [])


def test_column_positions_follow_request_order():
    schema = Schema.build(["id", "name", "year"], ["Integer", "String", "Integer"], ["id"])
    assert schema.column_positions(["year", "id"]) == [2, 0]
    assert schema.extract_domains([2, 1]) == [INTEGER, TEXT]
    assert extract((1, "A", 1999), [2, 0]) == (1999, 1)
    assert schema.column_index("name") == 1
    assert schema.column_index("missing") == -1

    with pytest.raises(UnknownAttribute) as excinfo:
        schema.column_positions(["id", "missing"])
    assert excinfo.value.name == "missing"
    assert "missing" in str(excinfo.value)


def test_compatibility_ignores_names_and_keys():
    left = Schema.build(["id", "name"], ["Integer", "String"], ["id"])
    right = Schema.build(["num", "label"], ["Long", "Text"], ["label"])
    other = Schema.build(["num", "label"], ["String", "Integer"], ["num"])
    short = Schema.build(["num"], ["Integer"], ["num"])

    assert left.compatible(right)
    assert not left.compatible(other)
    with pytest.raises(SchemaIncompatible, match="arity"):
        left.check_compatible(short)
    with pytest.raises(SchemaIncompatible, match="domain 0"):
        left.check_compatible(other)


def test_type_check_reports_arity_and_domain():
    schema = Schema.build(["id", "name", "year"], ["Integer", "String", "Integer"], ["id"])
    schema.type_check((1, "A", 1999))

    with pytest.raises(ArityMismatch):
        schema.type_check((1, "A"))
    with pytest.raises(TypeMismatch, match="year"):
        schema.type_check((1, "A", "1999"))


def test_key_of_and_serialization():
    schema = Schema.build(["title", "year", "length"], ["String", "Integer", "Integer"], ["title", "year"])
    assert schema.key_of(("Rocky", 1985, 200)) == ("Rocky", 1985)

    payload = serialize_schema(schema)
    assert payload == {
        "attributes": ["title", "year", "length"],
        "domains": [TEXT, INTEGER, INTEGER],
        "key": ["title", "year"],
    }
    assert deserialize_schema(payload) == schema


def test_split_names():
    assert split_names("title  year ") == ["title", "year"]
    assert split_names(["title", "year"]) == ["title", "year"]

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reltable import Table

INDEX_KINDS = ["none", "hash", "ordered", "btree"]


def _movies(index_kind):
    table = Table.from_strings(
        "movie",
        "title year length",
        "String Integer Integer",
        "title year",
        index_kind=index_kind,
    )
    for row in [
        ("Star_Wars", 1977, 124),
        ("Star_Wars_2", 1980, 124),
        ("Rocky", 1985, 200),
        ("Rambo", 1978, 100),
    ]:
        assert table.insert(row)
    return table


@pytest.mark.parametrize("index_kind", INDEX_KINDS)
def test_select_by_composite_key(index_kind):
    movie = _movies(index_kind)

    result = movie.select_key(("Rocky", 1985))
    assert result.tuples == [("Rocky", 1985, 200)]
    assert result.attributes == movie.attributes

    assert movie.select_key(["Rambo", 1978]).tuples == [("Rambo", 1978, 100)]
    assert movie.select_key(("Rocky", 1999)).tuple_count() == 0


@pytest.mark.parametrize("index_kind", INDEX_KINDS)
def test_select_key_only_matches_the_key_columns(index_kind):
    table = Table("t", "id other", "Integer Integer", "id", index_kind=index_kind)
    table.insert((1, 2))
    table.insert((2, 1))

    assert table.select_key(1).tuples == [(1, 2)]
    assert table.select_key((2,)).tuples == [(2, 1)]
    assert table.select_key(3).tuples == []


@pytest.mark.parametrize("index_kind", INDEX_KINDS)
def test_malformed_key_yields_empty_result(index_kind, caplog):
    movie = _movies(index_kind)

    with caplog.at_level(logging.ERROR, logger="reltable"):
        assert movie.select_key("Rocky").tuple_count() == 0
        assert movie.select_key((None, 1985)).tuple_count() == 0
        assert movie.select_key(None).tuple_count() == 0
    assert "key lookup on movie failed" in caplog.text


def test_incomparable_key_on_ordered_index_is_reported(caplog):
    movie = _movies("ordered")
    with caplog.at_level(logging.ERROR, logger="reltable"):
        result = movie.select_key((1985, "Rocky"))
    assert result.tuple_count() == 0
    assert "key lookup on movie failed" in caplog.text


def test_index_is_built_for_initial_tuples_and_derived_tables():
    table = Table(
        "films",
        "id name",
        "Integer String",
        "id",
        tuples=[(1, "A"), (2, "B")],
        index_kind="hash",
    )
    assert table.select_key(2).tuples == [(2, "B")]

    derived = table.select(lambda t: t[0] > 1)
    assert derived.index_kind == "hash"
    assert derived.index_entries() == [((2,), (2, "B"))]
    assert derived.select_key(1).tuple_count() == 0

import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reltable import Table
from reltable.display import format_rows
from reltable.repl import build_movie_db, main


def test_format_rows_table():
    text = format_rows(["id", "name"], [(1, "Alice"), (22, None)], title="users")
    assert text.splitlines() == [
        "Table users",
        "+----+-------+",
        "| id | name  |",
        "+----+-------+",
        "| 1  | Alice |",
        "| 22 | NULL  |",
        "+----+-------+",
        "(2 row(s))",
    ]


def test_render_marks_key_columns_and_index():
    table = Table("films", "id name", "Integer String", "id", tuples=[(1, "A")], index_kind="hash")
    assert "| id* | name |" in table.render()
    assert "(1) -> (1, A)" in table.render_index()


def test_movie_db_sample():
    db = build_movie_db("hash")
    assert db["movie"].tuple_count() == 4
    assert db["studio"].select_key("Fox").tuple_count() == 1
    assert db["movieStar"].natural_join(db["starsIn"]).tuple_count() == 3


def test_demo_runs_and_saves(tmp_path, capsys):
    store = tmp_path / "demo_store"
    assert main(["--store", str(store), "demo", "--index", "btree", "--save"]) == 0
    out = capsys.readouterr().out
    assert "movie join studio" in out
    assert "Index for movie (btree)" in out
    assert (store / "movie.dbf").exists()

    assert main(["--store", str(store), "show", "movie", "--index"]) == 0
    out = capsys.readouterr().out
    assert "Star_Wars_2" in out
    assert "Index for movie (btree)" in out


def test_show_missing_table_fails(tmp_path, capsys):
    log_file = tmp_path / "trace.log"
    assert main(["--store", str(tmp_path), "--log-file", str(log_file), "show", "nope"]) == 1
    assert "could not load table 'nope'" in capsys.readouterr().out
    assert "load: could not read" in log_file.read_text(encoding="utf-8")


def test_relative_log_file_gets_one_handler(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for _ in range(2):
        assert main(["--store", "store", "--log-file", "trace.log", "show", "nope"]) == 1

    logger = logging.getLogger("reltable")
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename).resolve() == (tmp_path / "trace.log").resolve()
    assert (tmp_path / "trace.log").read_text(encoding="utf-8").count("load: could not read") == 2

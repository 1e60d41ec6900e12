from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional

from reltable.config import get_config, set_config
from reltable.index.base import INDEX_KINDS
from reltable.table import Table

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _build_logger(verbose: bool, log_file: Optional[str]) -> logging.Logger:
    logger = logging.getLogger("reltable")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file:
        log_path = os.path.abspath(log_file)
        has_file_handler = any(
            isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == log_path
            for h in logger.handlers
        )
        if not has_file_handler:
            handler = logging.FileHandler(log_file, encoding="utf-8")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
    return logger


def build_movie_db(index_kind: str | None = None) -> Dict[str, Table]:
    movie = Table.from_strings(
        "movie",
        "title year length genre studioName producerNo",
        "String Integer Integer String String Integer",
        "title year",
        index_kind=index_kind,
    )
    cinema = Table.from_strings(
        "cinema",
        "title year length genre studioName producerNo",
        "String Integer Integer String String Integer",
        "title year",
        index_kind=index_kind,
    )
    movie_star = Table.from_strings(
        "movieStar",
        "name address gender birthdate",
        "String String Character String",
        "name",
        index_kind=index_kind,
    )
    stars_in = Table.from_strings(
        "starsIn",
        "movieTitle movieYear name",
        "String Integer String",
        "movieTitle movieYear name",
        index_kind=index_kind,
    )
    studio = Table.from_strings(
        "studio",
        "name address presNo",
        "String String Integer",
        "name",
        index_kind=index_kind,
    )

    for row in [
        ("Star_Wars", 1977, 124, "sciFi", "Fox", 12345),
        ("Star_Wars_2", 1980, 124, "sciFi", "Fox", 12345),
        ("Rocky", 1985, 200, "action", "Universal", 12125),
        ("Rambo", 1978, 100, "action", "Universal", 32355),
    ]:
        movie.insert(row)
    for row in [
        ("Rocky", 1985, 200, "action", "Universal", 12125),
        ("Rambo", 1978, 100, "action", "Universal", 32355),
        ("Galaxy_Quest", 1999, 104, "comedy", "DreamWorks", 67890),
    ]:
        cinema.insert(row)
    for row in [
        ("Carrie_Fisher", "Hollywood", "F", "9/9/99"),
        ("Mark_Hamill", "Brentwood", "M", "8/8/88"),
        ("Harrison_Ford", "Beverly_Hills", "M", "7/7/77"),
    ]:
        movie_star.insert(row)
    for row in [
        ("Star_Wars", 1977, "Carrie_Fisher"),
        ("Star_Wars", 1977, "Mark_Hamill"),
        ("Star_Wars", 1977, "Harrison_Ford"),
    ]:
        stars_in.insert(row)
    for row in [
        ("Fox", "Los_Angeles", 7777),
        ("Universal", "Universal_City", 8888),
        ("DreamWorks", "Universal_City", 9999),
    ]:
        studio.insert(row)

    return {
        "movie": movie,
        "cinema": cinema,
        "movieStar": movie_star,
        "starsIn": stars_in,
        "studio": studio,
    }


def _show(title: str, table: Optional[Table]) -> None:
    print(f"\n{title}")
    if table is None:
        print("(no result)")
        return
    table.print()


def run_demo(index_kind: str | None, save: bool) -> int:
    db = build_movie_db(index_kind)
    movie = db["movie"]
    year = movie.column_index("year")

    for table in db.values():
        table.print()
        if table.index_kind != "none":
            table.print_index()

    _show("project title year", movie.project("title year"))
    _show("select year < 1980", movie.select(lambda t: t[year] < 1980))
    _show("select key (Star_Wars_2, 1980)", movie.select_key(("Star_Wars_2", 1980)))
    _show("movie union cinema", movie.union(db["cinema"]))
    _show("movie minus cinema", movie.minus(db["cinema"]))
    _show("movie join studio", movie.join("studioName", "name", db["studio"]))
    _show("movie hash join studio", movie.hash_join("studioName", "name", db["studio"]))
    _show("movie index join studio", movie.index_join("studioName", "name", db["studio"]))
    _show("movieStar natural join starsIn", db["movieStar"].natural_join(db["starsIn"]))

    if save:
        failures: List[str] = [name for name, table in db.items() if table.save() is None]
        if failures:
            print(f"error: could not save {', '.join(failures)}")
            return 1
        print(f"\nSaved {len(db)} tables to {get_config().store_dir}")
    return 0


def run_show(name: str, show_index: bool) -> int:
    table = Table.load(name)
    if table is None:
        print(f"error: could not load table '{name}'")
        return 1
    table.print()
    if show_index:
        table.print_index()
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="reltable relational algebra driver")
    parser.add_argument("--store", help="Directory holding saved tables")
    parser.add_argument("--log-file", help="Also write operation traces to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug detail")
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Build the sample movie database and run every operator")
    demo.add_argument("--index", choices=INDEX_KINDS, help="Key index kind for the sample tables")
    demo.add_argument("--save", action="store_true", help="Save the sample tables to the store")

    show = sub.add_parser("show", help="Load a saved table and print it")
    show.add_argument("name", help="Table name")
    show.add_argument("--index", action="store_true", help="Print the table's key index too")

    args = parser.parse_args(argv)
    _build_logger(args.verbose, args.log_file)
    set_config(get_config().with_overrides(store_dir=args.store))

    if args.command == "demo":
        return run_demo(args.index, args.save)
    return run_show(args.name, args.index)


if __name__ == "__main__":
    sys.exit(main())

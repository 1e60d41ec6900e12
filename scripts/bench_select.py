import time

from reltable import Table
from reltable.index import INDEX_KINDS


def main() -> None:
    n = 5000
    for kind in INDEX_KINDS:
        table = Table("bench", "id v", "Integer String", "id", index_kind=kind)

        start = time.perf_counter()
        for i in range(1, n + 1):
            table.insert((i, "x"))
        insert_seconds = time.perf_counter() - start

        lookups = range(1, n + 1, max(1, n // 500))
        start = time.perf_counter()
        for i in lookups:
            table.select_key(i)
        select_seconds = time.perf_counter() - start

        print(f"[{kind}] rows: {n}")
        print(f"[{kind}] INSERT/s: {n / insert_seconds:.2f}")
        print(f"[{kind}] KEY SELECT/s: {len(lookups) / select_seconds:.2f}")


if __name__ == "__main__":
    main()

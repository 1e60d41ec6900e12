from __future__ import annotations

from typing import Any, List, Sequence, Tuple


def format_scalar(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def format_rows(columns: Sequence[str], rows: Sequence[Sequence[Any]], title: str | None = None) -> str:
    """Render rows as the bordered ``+---+`` grid shared by the CLI and ``Table.render``.

    An optional ``Table <title>`` line goes above the grid and a ``(N row(s))``
    footer below it. ``None`` values print as ``NULL``.
    """
    rendered_rows = [[format_scalar(value) for value in row] for row in rows]

    widths = []
    for idx, col in enumerate(columns):
        cell_width = max(len(r[idx]) for r in rendered_rows) if rendered_rows else 0
        widths.append(max(len(col), cell_width))

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    header = "| " + " | ".join(col.ljust(widths[i]) for i, col in enumerate(columns)) + " |"
    body = [
        "| " + " | ".join(values[i].ljust(widths[i]) for i in range(len(columns))) + " |"
        for values in rendered_rows
    ]

    lines = [f"Table {title}"] if title is not None else []
    lines.extend([border, header, border, *body, border, f"({len(rows)} row(s))"])
    return "\n".join(lines)


def format_table(table: Any) -> str:
    columns = [
        f"{name}*" if name in table.key else name
        for name in table.attributes
    ]
    return format_rows(columns, table.tuples, title=table.name)


def format_index(name: str, entries: List[Tuple[Tuple[Any, ...], Tuple[Any, ...]]], kind: str) -> str:
    lines = [f"Index for {name} ({kind})", "-------------------"]
    for key, row in entries:
        key_text = ", ".join(format_scalar(v) for v in key)
        row_text = ", ".join(format_scalar(v) for v in row)
        lines.append(f"({key_text}) -> ({row_text})")
    lines.append("-------------------")
    return "\n".join(lines)

"""Markdown table and number formatting for standings reports.

Column order is fixed by the caller and cell text is escaped, so the same
snapshot always renders to the same bytes.
"""
from __future__ import annotations
from typing import Any

from ffl.constants import POINTS_PLACES


def md_escape(s: str) -> str:
    """Escape pipes and flatten newlines so a value stays inside one table cell."""
    return s.replace("|", "\\|").replace("\n", " ")


def md_table(headers: list[str], rows: list[list[Any]]) -> list[str]:
    """Render a Markdown table into a list of lines (header, separator, rows)."""
    def esc(v: Any) -> str:
        return md_escape(str(v))

    lines: list[str] = []
    lines.append("| " + " | ".join(esc(h) for h in headers) + " |")
    lines.append("| " + " | ".join(":---" for _ in headers) + " |")
    for r in rows:
        lines.append("| " + " | ".join(esc(c) for c in r) + " |")
    return lines


def fmt_points(value: float | None) -> str:
    """Two-decimal points, or ``-`` when there is no data."""
    if value is None:
        return "-"
    return f"{value:.{POINTS_PLACES}f}"


def fmt_count(value: int | None) -> str:
    return "-" if value is None else str(value)

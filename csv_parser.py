"""Tolerant CSV tokenizer for spreadsheet exports.

Handles the quirks of a published Google Sheets export:
- Quoted fields with embedded commas and line breaks
- Doubled quotes inside a quoted field (``""`` -> ``"``)
- ``\\n``, ``\\r`` and ``\\r\\n`` row terminators
- Trailing blank lines / rows made only of separators
- An unterminated quote at end of input (the pending row is still emitted)

Usage:
    rows = parse_csv(text)
"""
from __future__ import annotations

from typing import List


def _is_blank_row(row: List[str]) -> bool:
    return all(not field.strip() for field in row)


def parse_csv(text: str) -> List[List[str]]:
    """Split ``text`` into rows of raw field strings.

    No schema is enforced: rows may have any number of fields. Rows whose
    fields are all empty or whitespace are dropped.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    cur: List[str] = []
    in_quotes = False

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if ch == '"':
            if in_quotes and nxt == '"':
                cur.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            row.append("".join(cur))
            cur = []
        elif ch in "\r\n" and not in_quotes:
            if ch == "\r" and nxt == "\n":
                i += 1
            row.append("".join(cur))
            cur = []
            if not _is_blank_row(row):
                rows.append(row)
            row = []
        else:
            cur.append(ch)
        i += 1

    # flush whatever is pending, including an unterminated quoted field
    row.append("".join(cur))
    if not _is_blank_row(row):
        rows.append(row)
    return rows

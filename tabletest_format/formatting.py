"""
tabletest_format/formatting.py

Column alignment for pipe-delimited table text, the kind embedded in
@TableTest annotation arguments or stored in standalone .table files.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from rich.cells import cell_len

__all__ = [
    "TableFormatError",
    "MalformedTableError",
    "EmptyTableError",
    "DEFAULT_DELIMITER",
    "display_width",
    "split_row",
    "normalize_cell",
    "column_widths",
    "format_table",
]

DEFAULT_DELIMITER = "|"

_COMMENT_PREFIX = "//"
_QUOTES = ("\"", "'")
_VALUE_OPENERS = "[{,:"


class TableFormatError(ValueError):
    """Raised when table text cannot be formatted."""


class MalformedTableError(TableFormatError):
    """Raised when rows disagree on their number of cells."""

    def __init__(self, line: int, expected: int, found: int) -> None:
        self.line = line
        self.expected = expected
        self.found = found
        super().__init__(
            f"line {line}: row has {found} cells, expected {expected}"
        )


class EmptyTableError(TableFormatError):
    """Raised when table text contains no rows at all."""


def display_width(text: str) -> int:
    """Number of terminal cells ``text`` occupies (CJK counts 2, combining marks 0)."""
    return cell_len(text)


def split_row(line: str, delimiter: str = DEFAULT_DELIMITER) -> List[str]:
    """
    Split one table row into trimmed cells.

    The delimiter only splits outside quoted values and outside ``[...]`` /
    ``{...}`` collections. A quote opens a value when it starts the cell or
    follows ``[``, ``{``, ``,`` or ``:`` inside a collection, so apostrophes
    in plain text (``don't``) are ordinary characters. A delimiter preceded
    by a backslash never splits. Escapes and quotes are kept verbatim.
    """
    if len(delimiter) != 1:
        raise ValueError("delimiter must be a single character")

    cells: List[str] = []
    current: List[str] = []
    quote: Optional[str] = None
    depth = 0
    # last non-space character of the current cell
    prev: Optional[str] = None
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\" and i + 1 < len(line):
            current.append(line[i:i + 2])
            prev = line[i + 1]
            i += 2
            continue
        opens_value = prev is None or (depth > 0 and prev in _VALUE_OPENERS)
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES and opens_value:
            quote = ch
        elif ch in "[{" and opens_value:
            depth += 1
        elif ch in "]}" and depth:
            depth -= 1
        elif ch == delimiter and depth == 0:
            cells.append("".join(current).strip())
            current = []
            prev = None
            i += 1
            continue
        current.append(ch)
        if not ch.isspace():
            prev = ch
        i += 1
    cells.append("".join(current).strip())
    return cells


class _NotACollection(Exception):
    pass


def _skip_spaces(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def _peek(text: str, i: int) -> str:
    return text[i] if i < len(text) else ""


def _parse_value(text: str, i: int, stops: str) -> Tuple[str, int]:
    i = _skip_spaces(text, i)
    c = _peek(text, i)
    if c == "[":
        return _parse_list(text, i)
    if c == "{":
        return _parse_set(text, i)
    if c and c in _QUOTES:
        end = text.find(c, i + 1)
        if end < 0:
            raise _NotACollection()
        return text[i:end + 1], end + 1
    j = i
    while j < len(text) and text[j] not in stops:
        if text[j] in "[]{}":
            raise _NotACollection()
        j += 1
    return text[i:j].strip(), j


def _parse_list(text: str, i: int) -> Tuple[str, int]:
    i = _skip_spaces(text, i + 1)
    if _peek(text, i) == "]":
        return "[]", i + 1
    if _peek(text, i) == ":":
        i = _skip_spaces(text, i + 1)
        if _peek(text, i) != "]":
            raise _NotACollection()
        return "[:]", i + 1

    first, i = _parse_value(text, i, ":,]")
    i = _skip_spaces(text, i)
    if _peek(text, i) != ":":
        items = [first]
        while _peek(text, i) == ",":
            item, i = _parse_value(text, i + 1, ",]")
            items.append(item)
            i = _skip_spaces(text, i)
        if _peek(text, i) != "]":
            raise _NotACollection()
        return "[" + ", ".join(items) + "]", i + 1

    entries = []
    key = first
    while True:
        value, i = _parse_value(text, i + 1, ",]")
        entries.append(f"{key}: {value}")
        i = _skip_spaces(text, i)
        if _peek(text, i) == "]":
            return "[" + ", ".join(entries) + "]", i + 1
        if _peek(text, i) != ",":
            raise _NotACollection()
        key, i = _parse_value(text, i + 1, ":,]")
        i = _skip_spaces(text, i)
        if _peek(text, i) != ":":
            raise _NotACollection()


def _parse_set(text: str, i: int) -> Tuple[str, int]:
    i = _skip_spaces(text, i + 1)
    if _peek(text, i) == "}":
        return "{}", i + 1
    items = []
    while True:
        item, i = _parse_value(text, i, ",}")
        items.append(item)
        i = _skip_spaces(text, i)
        if _peek(text, i) == "}":
            return "{" + ", ".join(items) + "}", i + 1
        if _peek(text, i) != ",":
            raise _NotACollection()
        i += 1


def normalize_cell(cell: str) -> str:
    """
    Normalise the spacing of a list, map or set cell.

    ``[1,2]`` becomes ``[1, 2]``, ``[a:1]`` becomes ``[a: 1]``, ``{ [1,2] }``
    becomes ``{[1, 2]}``. Quoted elements are kept verbatim. Cells that are
    not a well-formed collection are returned unchanged.
    """
    if not cell or cell[0] not in "[{":
        return cell
    try:
        rendered, end = _parse_value(cell, 0, "")
    except _NotACollection:
        return cell
    return rendered if end == len(cell) else cell


def column_widths(rows: Sequence[Sequence[str]]) -> List[int]:
    """Maximum display width of each column across ``rows``."""
    widths: List[int] = []
    for row in rows:
        for i, cell in enumerate(row):
            width = display_width(cell)
            if i < len(widths):
                widths[i] = max(widths[i], width)
            else:
                widths.append(width)
    return widths


def _is_blank(line: str) -> bool:
    return not line.strip()


def _is_comment(line: str) -> bool:
    return line.strip().startswith(_COMMENT_PREFIX)


def _leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip())]


def _render_row(cells: Sequence[str], widths: Sequence[int], delimiter: str) -> str:
    last = len(cells) - 1
    parts = []
    for i, cell in enumerate(cells):
        if i == last:
            parts.append(cell)
        else:
            parts.append(cell + " " * (widths[i] - display_width(cell)))
    return f" {delimiter} ".join(parts).rstrip()


def format_table(
    table_text: str,
    delimiter: str = DEFAULT_DELIMITER,
    indent: Optional[str] = None,
) -> str:
    """
    Align the columns of ``table_text``.

    Every content row is re-rendered with its cells padded to the widest cell
    of each column (display width) and joined by `` | ``. The last column is
    never padded. Rows are prefixed with the indentation of the first content
    line, or with ``indent`` when one is given. Blank lines are kept as found;
    ``//`` comment lines are kept and re-indented with the rows.
    Collection cells are normalised with :func:`normalize_cell` first.

    A table made of a single row (header only) is returned unchanged.

    Raises:
        EmptyTableError: ``table_text`` has no rows.
        MalformedTableError: rows have different numbers of cells.
    """
    lines = table_text.split("\n")

    rows: List[Tuple[int, List[str]]] = []
    for index, line in enumerate(lines):
        if _is_blank(line) or _is_comment(line):
            continue
        cells = split_row(line.strip(), delimiter)
        rows.append((index, [normalize_cell(cell) for cell in cells]))

    if not rows:
        raise EmptyTableError("table has no rows")

    expected = len(rows[0][1])
    for index, cells in rows[1:]:
        if len(cells) != expected:
            raise MalformedTableError(index + 1, expected, len(cells))

    if len(rows) == 1:
        return table_text

    if indent is None:
        indent = _leading_whitespace(lines[rows[0][0]])
    widths = column_widths([cells for _, cells in rows])

    out = list(lines)
    for index, cells in rows:
        out[index] = indent + _render_row(cells, widths, delimiter)
    for index, line in enumerate(lines):
        if _is_comment(line):
            out[index] = indent + line.strip()
    return "\n".join(out)

"""
tabletest_format/source_formatter.py

Formats every @TableTest table found in a Java or Kotlin source file.
"""
from __future__ import annotations

import logging

from tabletest_format.config import SPACES_4, FormatConfig
from tabletest_format.extractor import DEFAULT_ANNOTATION, find_table_literals
from tabletest_format.formatting import (
    DEFAULT_DELIMITER,
    EmptyTableError,
    MalformedTableError,
    format_table,
)

logger = logging.getLogger(__name__)

__all__ = ["format_table_literal", "format_source"]


def format_table_literal(
    literal: str,
    base_indent: str,
    config: FormatConfig = SPACES_4,
    delimiter: str = DEFAULT_DELIMITER,
) -> str:
    """
    Format the text between the quotes of one text block.

    ``base_indent`` is the leading whitespace of the annotation line. When the
    config asks for indentation, rows and the closing-quote line are indented
    to ``base_indent`` plus one config unit, and the table is moved to its own
    line if it started right after the opening quotes.
    """
    if config.indent_size == 0:
        return format_table(literal, delimiter)

    indent = base_indent + config.indent_unit()
    formatted = format_table(literal, delimiter, indent=indent)
    if formatted == literal:
        return literal

    lines = formatted.split("\n")
    if len(lines) > 1 and not lines[-1].strip():
        lines[-1] = indent
    formatted = "\n".join(lines)
    return formatted if formatted.startswith("\n") else "\n" + formatted


def format_source(
    content: str,
    config: FormatConfig = SPACES_4,
    delimiter: str = DEFAULT_DELIMITER,
    annotation: str = DEFAULT_ANNOTATION,
) -> str:
    """
    Return ``content`` with all of its table literals formatted.

    Tables without rows are skipped. A malformed table aborts the whole file:
    the MalformedTableError is re-raised with its line number counted from
    the start of ``content``.
    """
    matches = find_table_literals(content, annotation)
    if not matches:
        return content

    result = content
    # last to first, so earlier offsets stay valid
    for match in sorted(matches, key=lambda m: m.content_start, reverse=True):
        original = match.content(content)
        try:
            formatted = format_table_literal(original, match.base_indent(content), config, delimiter)
        except EmptyTableError:
            logger.debug("Skipping empty table at offset %d", match.content_start)
            continue
        except MalformedTableError as e:
            line_offset = content.count("\n", 0, match.content_start)
            raise MalformedTableError(e.line + line_offset, e.expected, e.found) from e

        if formatted != original:
            result = result[:match.content_start] + formatted + result[match.content_end:]

    return result

"""
tabletest_format/extractor.py

Locates the text blocks passed to @TableTest annotations in Java and Kotlin
sources. This is a lexical scan, not a parser: it only tracks enough context
(comments, string and char literals, text blocks) to tell a real annotation
from one that appears inside a literal or a comment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

__all__ = ["TableMatch", "DEFAULT_ANNOTATION", "find_table_literals"]

DEFAULT_ANNOTATION = "TableTest"

_TEXT_BLOCK = "\"\"\""

# Scanner states
_CODE = "code"
_SEEKING = "seeking"
_LINE_COMMENT = "line_comment"
_BLOCK_COMMENT = "block_comment"
_STRING = "string"
_CHAR = "char"
_BLOCK = "text_block"


@dataclass(frozen=True)
class TableMatch:
    """Span of one table-bearing text block and of its annotation's indentation."""

    content_start: int
    content_end: int
    indent_start: int
    indent_end: int

    def content(self, source: str) -> str:
        return source[self.content_start:self.content_end]

    def base_indent(self, source: str) -> str:
        return source[self.indent_start:self.indent_end]


def _read_annotation_name(source: str, start: int) -> Tuple[int, str]:
    end = start
    while end < len(source) and (source[end].isalnum() or source[end] in "_$."):
        end += 1
    return end, source[start:end]


def _indent_span(source: str, pos: int) -> Tuple[int, int]:
    line_start = source.rfind("\n", 0, pos) + 1
    end = line_start
    while end < pos and source[end] in " \t":
        end += 1
    return line_start, end


def _is_escaped(source: str, pos: int) -> bool:
    count = 0
    i = pos - 1
    while i >= 0 and source[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


def find_table_literals(source: str, annotation: str = DEFAULT_ANNOTATION) -> List[TableMatch]:
    """
    Return every text block used as an argument of ``annotation``, in source order.

    The annotation may be written qualified (``@org.tabletest.TableTest``) and
    take its table either positionally or as a named argument
    (``value = \"\"\"...\"\"\"``). Annotations inside comments or string
    literals are ignored.
    """
    if source is None:
        raise TypeError("source must not be None")

    matches: List[TableMatch] = []
    state = _CODE
    return_state = _CODE
    indent: Optional[Tuple[int, int]] = None
    content_start: Optional[int] = None
    paren_depth = 0
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        if state in (_CODE, _SEEKING):
            if source.startswith("//", i):
                return_state, state = state, _LINE_COMMENT
                i += 2
                continue
            if source.startswith("/*", i):
                return_state, state = state, _BLOCK_COMMENT
                i += 2
                continue

            if state == _SEEKING and paren_depth == 0 and c != "(" and not c.isspace():
                # annotation without an argument list
                state = _CODE
                indent = None
                continue

            if source.startswith(_TEXT_BLOCK, i):
                if state == _SEEKING:
                    content_start = i + 3
                state = _BLOCK
                i += 3
                continue
            if c == "\"":
                return_state, state = state, _STRING
                i += 1
                continue
            if c == "'":
                return_state, state = state, _CHAR
                i += 1
                continue

            if state == _CODE:
                if c == "@":
                    end, name = _read_annotation_name(source, i + 1)
                    if name.rsplit(".", 1)[-1] == annotation:
                        indent = _indent_span(source, i)
                        paren_depth = 0
                        state = _SEEKING
                        i = end
                        continue
            else:
                if c == "(":
                    paren_depth += 1
                elif c == ")":
                    paren_depth -= 1
                    if paren_depth == 0:
                        state = _CODE
                        indent = None
                elif c in ";{":
                    state = _CODE
                    indent = None

        elif state == _LINE_COMMENT:
            if c == "\n":
                state = return_state

        elif state == _BLOCK_COMMENT:
            if source.startswith("*/", i):
                state = return_state
                i += 2
                continue

        elif state in (_STRING, _CHAR):
            quote = "\"" if state == _STRING else "'"
            if c == "\\":
                i += 2
                continue
            if c == quote or c == "\n":
                state = return_state

        elif state == _BLOCK:
            if source.startswith(_TEXT_BLOCK, i) and not _is_escaped(source, i):
                if content_start is not None and indent is not None:
                    matches.append(TableMatch(content_start, i, indent[0], indent[1]))
                    logger.debug("Found table literal at offset %d", content_start)
                content_start = None
                indent = None
                state = _CODE
                i += 3
                continue

        i += 1

    return matches

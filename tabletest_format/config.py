"""
tabletest_format/config.py

Indentation settings for formatted tables, resolved from defaults and
.editorconfig files.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from editorconfig import EditorConfigError, get_properties

logger = logging.getLogger(__name__)

__all__ = [
    "IndentStyle",
    "FormatConfig",
    "SPACES_4",
    "NO_INDENT",
    "default_config_for",
    "lookup_config",
]


class IndentStyle(Enum):
    SPACE = " "
    TAB = "\t"

    def repeat(self, count: int) -> str:
        return self.value * count

    @classmethod
    def parse(cls, value: str) -> "IndentStyle":
        """Map an .editorconfig / command line value (``space``, ``tab``) to a style."""
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown indent style: {value!r}") from None


@dataclass(frozen=True)
class FormatConfig:
    """
    How table rows are indented inside a source file.

    With ``indent_size`` > 0 rows are placed ``indent_size`` units of
    ``indent_style`` deeper than the annotation they belong to. With 0 the
    table keeps the indentation it already has.
    """

    indent_style: IndentStyle = IndentStyle.SPACE
    indent_size: int = 4

    def __post_init__(self) -> None:
        if not isinstance(self.indent_style, IndentStyle):
            raise TypeError(f"indent_style must be an IndentStyle, got {self.indent_style!r}")
        if self.indent_size < 0:
            raise ValueError(f"indent_size must not be negative: {self.indent_size}")

    def indent_unit(self) -> str:
        return self.indent_style.repeat(self.indent_size)


# Tables in .java / .kt files sit one level below their annotation
SPACES_4 = FormatConfig(IndentStyle.SPACE, 4)
# Standalone .table files are not indented
NO_INDENT = FormatConfig(IndentStyle.SPACE, 0)


def default_config_for(path: Path) -> FormatConfig:
    return NO_INDENT if Path(path).suffix == ".table" else SPACES_4


def _parse_indent_style(properties: Mapping[str, str], default: IndentStyle) -> IndentStyle:
    value = properties.get("indent_style")
    if value is None:
        return default
    try:
        return IndentStyle.parse(value)
    except ValueError:
        logger.debug("Ignoring indent_style=%s", value)
        return default


def _parse_indent_size(properties: Mapping[str, str], default: int) -> int:
    value = properties.get("indent_size")
    if value is None:
        return default
    if value.strip().lower() == "tab":
        # one indent_style unit per level
        return 1
    try:
        size = int(value)
    except ValueError:
        logger.debug("Ignoring indent_size=%s", value)
        return default
    return size if size >= 0 else default


def lookup_config(path: Path, defaults: Optional[FormatConfig] = None) -> FormatConfig:
    """
    Resolve the formatting config for ``path`` from .editorconfig files.

    Looks in the file's directory and its parents, following the EditorConfig
    rules. Properties that are missing or invalid fall back to ``defaults``
    (``default_config_for(path)`` when not given).
    """
    if defaults is None:
        defaults = default_config_for(path)

    try:
        properties = get_properties(str(Path(path).resolve()))
    except EditorConfigError as e:
        logger.warning("Could not read .editorconfig for %s: %s", path, e)
        return defaults

    return FormatConfig(
        indent_style=_parse_indent_style(properties, defaults.indent_style),
        indent_size=_parse_indent_size(properties, defaults.indent_size),
    )

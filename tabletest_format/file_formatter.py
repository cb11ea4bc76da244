"""
tabletest_format/file_formatter.py

Formats single files (.table, .java, .kt) and aggregates the results of a run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from tabletest_format.config import FormatConfig, IndentStyle, default_config_for, lookup_config
from tabletest_format.formatting import (
    DEFAULT_DELIMITER,
    MalformedTableError,
    TableFormatError,
    format_table,
)
from tabletest_format.io_tools import read_text
from tabletest_format.source_formatter import format_source

logger = logging.getLogger(__name__)

__all__ = ["ConfigOverrides", "FormattingResult", "FormattingStatus", "resolve_config", "format_file"]


@dataclass(frozen=True)
class ConfigOverrides:
    """Indentation settings given explicitly, e.g. on the command line."""

    indent_style: Optional[IndentStyle] = None
    indent_size: Optional[int] = None

    def apply(self, config: FormatConfig) -> FormatConfig:
        return FormatConfig(
            indent_style=self.indent_style if self.indent_style is not None else config.indent_style,
            indent_size=self.indent_size if self.indent_size is not None else config.indent_size,
        )


@dataclass
class FormattingResult:
    path: Path
    changed: bool
    content: str
    error: Optional[str] = None
    line: Optional[int] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.line is not None else str(self.path)


@dataclass
class FormattingStatus:
    """Counts of files checked and changed during one run."""

    files_checked: int = 0
    changed_files: List[Path] = field(default_factory=list)
    failed: List[FormattingResult] = field(default_factory=list)

    def add_result(self, result: FormattingResult) -> None:
        self.files_checked += 1
        if result.failed:
            self.failed.append(result)
        elif result.changed:
            self.changed_files.append(result.path)

    @property
    def files_changed(self) -> int:
        return len(self.changed_files)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_files)

    @property
    def has_errors(self) -> bool:
        return bool(self.failed)


def resolve_config(
    path: Path,
    overrides: Optional[ConfigOverrides] = None,
    use_editorconfig: bool = True,
) -> FormatConfig:
    """Defaults for the file type, then .editorconfig, then explicit overrides."""
    config = lookup_config(path) if use_editorconfig else default_config_for(path)
    return overrides.apply(config) if overrides else config


def _format_content(path: Path, content: str, config: FormatConfig, delimiter: str) -> str:
    if path.suffix == ".table":
        if not content.strip():
            return content
        indent = config.indent_unit() if config.indent_size else None
        return format_table(content, delimiter, indent=indent)
    return format_source(content, config, delimiter)


def format_file(
    path: Path,
    delimiter: str = DEFAULT_DELIMITER,
    overrides: Optional[ConfigOverrides] = None,
    use_editorconfig: bool = True,
) -> FormattingResult:
    """
    Format one file without writing it.

    Errors (unreadable file, malformed table) are recorded on the returned
    result, whose content is then the file's original text.
    """
    path = Path(path)
    try:
        original = read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Could not read %s: %s", path, e)
        return FormattingResult(path, False, "", error=str(e))

    crlf = "\r\n" in original
    content = original.replace("\r\n", "\n") if crlf else original
    config = resolve_config(path, overrides, use_editorconfig)

    try:
        formatted = _format_content(path, content, config, delimiter)
    except MalformedTableError as e:
        message = f"row has {e.found} cells, expected {e.expected}"
        return FormattingResult(path, False, original, error=message, line=e.line)
    except TableFormatError as e:
        return FormattingResult(path, False, original, error=str(e))

    if crlf:
        formatted = formatted.replace("\n", "\r\n")
    changed = formatted != original
    logger.debug("%s: %s", path, "needs formatting" if changed else "already formatted")
    return FormattingResult(path, changed, formatted)

"""Column alignment for tables embedded in @TableTest annotations and .table files."""
from .config import (
    NO_INDENT,
    SPACES_4,
    FormatConfig,
    IndentStyle,
    lookup_config,
)
from .extractor import TableMatch, find_table_literals
from .file_formatter import (
    ConfigOverrides,
    FormattingResult,
    FormattingStatus,
    format_file,
)
from .formatting import (
    EmptyTableError,
    MalformedTableError,
    TableFormatError,
    display_width,
    format_table,
    normalize_cell,
    split_row,
)
from .source_formatter import format_source, format_table_literal

__all__ = [
    "ConfigOverrides",
    "EmptyTableError",
    "FormatConfig",
    "FormattingResult",
    "FormattingStatus",
    "IndentStyle",
    "MalformedTableError",
    "NO_INDENT",
    "SPACES_4",
    "TableFormatError",
    "TableMatch",
    "display_width",
    "find_table_literals",
    "format_file",
    "format_source",
    "format_table",
    "format_table_literal",
    "lookup_config",
    "normalize_cell",
    "split_row",
]

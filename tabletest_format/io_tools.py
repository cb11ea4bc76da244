"""
tabletest_format/io_tools.py

Utility functions for finding files to format and writing results back.
"""

import os
import logging
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Iterable, List

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".table", ".java", ".kt")


def is_supported(path: Path) -> bool:
    return path.name.endswith(SUPPORTED_EXTENSIONS)


def discover_files(paths: Iterable[Path]) -> List[Path]:
    """
    Collects the files to format from a mix of files and directories.

    Args:
        paths: Files or directories. Directories are walked recursively.

    Returns:
        Sorted, de-duplicated list of files with a supported extension.
        Paths that do not exist are logged and skipped.
    """
    found = set()
    for path in map(Path, paths):
        if path.is_dir():
            candidates = [p for p in path.rglob("*") if p.is_file()]
            logger.debug("Scanned %s: %d files", path, len(candidates))
        elif path.exists():
            candidates = [path]
        else:
            logger.warning("Path does not exist: %s", path)
            continue
        found.update(p for p in candidates if is_supported(p))
    return sorted(found)


def read_text(path: Path) -> str:
    """Reads a UTF-8 file without translating line endings."""
    with open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_atomically(path: Path, content: str) -> None:
    """
    Replaces the contents of a file in one step.

    Args:
        path: File to overwrite.
        content: New text, written as UTF-8 with line endings untouched.

    Raises:
        OSError if the temporary file cannot be written or moved into place;
        the temporary file is removed in that case.
    """
    path = Path(path)
    tmp = NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        dir=path.parent,
        prefix=".tabletest-format-",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            tmp.write(content)
        if path.exists():
            os.chmod(tmp.name, path.stat().st_mode & 0o7777)
        os.replace(tmp.name, path)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        Path(tmp.name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s", path)

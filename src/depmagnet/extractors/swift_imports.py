"""Detect imported module names from the header block of Swift sources.

This is a textual heuristic, not a parser.  Imports are expected to sit in a
contiguous block at the top of each file; scanning stops at the first line
that is neither blank, a comment, nor an import declaration.  Imports that
appear after other top-level code are not reported.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from depmagnet.extractors import is_swift_source

logger = logging.getLogger(__name__)

_IMPORT_PREFIXES = ("import", "@testable", "@_exported")


def detect_imports(
    path: Path | str,
    *,
    deep_search: bool,
    ignore_filenames: frozenset[str] | set[str] = frozenset(),
) -> set[str] | None:
    """Return the union of imports found under *path*.

    *path* may be a single file or a directory.  With ``deep_search`` the
    directory is walked recursively, otherwise only its immediate files are
    read.  Returns None when *path* does not exist (or is a single file that
    is not an eligible Swift source).
    """
    path = Path(path)
    if not path.exists():
        return None

    if not path.is_dir():
        if is_swift_source(path) and path.name not in ignore_filenames:
            return file_imports(path)
        return None

    results: set[str] = set()
    for source in _iter_files(path, deep_search):
        if is_swift_source(source) and source.name not in ignore_filenames:
            results |= file_imports(source)
    return results


def file_imports(path: Path) -> set[str]:
    """Return the imports declared in the header block of one file."""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            lines = f.readlines()
    except OSError as e:
        logger.debug("Could not read %s: %s", path, e)
        return set()

    results: set[str] = set()
    for line in lines:
        clean = line.strip()
        if not clean or clean.startswith("/"):
            continue
        if not clean.startswith(_IMPORT_PREFIXES):
            break
        results.add(clean.split(" ")[-1])
    return results


def _iter_files(root: Path, deep_search: bool):
    if not deep_search:
        for child in sorted(root.iterdir()):
            if child.is_file():
                yield child
        return

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(dirpath) / filename

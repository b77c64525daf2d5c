"""Source extractors — shared helpers."""

from __future__ import annotations

from pathlib import Path

SWIFT_SUFFIX = ".swift"


def is_swift_source(path: Path | str) -> bool:
    """Return True if *path* names a Swift source file."""
    return str(path).endswith(SWIFT_SUFFIX)

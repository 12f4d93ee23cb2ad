"""Journal file access interface."""

from pathlib import Path
from typing import Protocol


class FileSource(Protocol):
    """Interface for locating and reading journal files."""

    def resolve(self, path: str | Path, base_dir: Path | None = None) -> Path:
        """Canonicalize `path`, resolving a relative path against `base_dir`."""
        ...

    def is_file(self, path: Path) -> bool:
        """Check if a canonical path names an existing file."""
        ...

    def read_bytes(self, path: Path) -> bytes:
        """Read a file's raw content. Raises OSError if unreadable."""
        ...

"""Local filesystem adapter for journal files."""

from pathlib import Path


class LocalFileSource:
    """
    Reads journal files from the local disk.

    Implements FileSource protocol. Paths are made absolute with symlinks
    resolved, so the same file reached by two spellings compares equal.
    """

    def __init__(self, root: Path | str | None = None):
        # base for relative paths given without an including file
        self.root = Path(root).expanduser() if root is not None else Path.cwd()

    def resolve(self, path: str | Path, base_dir: Path | None = None) -> Path:
        path = Path(path).expanduser()
        if not path.is_absolute():
            path = (base_dir or self.root) / path
        return path.resolve()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

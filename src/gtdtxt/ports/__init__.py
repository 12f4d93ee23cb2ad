"""Ports - interfaces/protocols for external dependencies."""

from .file_source import FileSource

__all__ = [
    "FileSource",
]

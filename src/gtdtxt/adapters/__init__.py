"""Adapters - I/O implementations of ports."""

from .local_files import LocalFileSource

__all__ = [
    "LocalFileSource",
]

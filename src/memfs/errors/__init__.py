"""Public error exports for memfs."""

from __future__ import annotations

from .exceptions import (
    AlreadyExistsError,
    InvalidContainmentError,
    InvalidMoveError,
    InvalidPathError,
    InvalidTypeError,
    MemFSError,
    NotAContainerError,
    NotFoundError,
    SnapshotError,
)

__all__ = [
    "MemFSError",
    "NotFoundError",
    "AlreadyExistsError",
    "InvalidTypeError",
    "NotAContainerError",
    "InvalidContainmentError",
    "InvalidPathError",
    "InvalidMoveError",
    "SnapshotError",
]

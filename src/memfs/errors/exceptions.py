"""Exception hierarchy for memfs."""

from __future__ import annotations

from typing import Any, Optional


class MemFSError(Exception):
    """
    Base exception for memfs.

    Attributes:
        details: Optional structured information (e.g., path, name, kind).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class NotFoundError(MemFSError):
    """Raised when a drive or a path segment does not exist."""


class AlreadyExistsError(MemFSError):
    """Raised when a name is already taken at the target scope."""


class InvalidTypeError(MemFSError):
    """Raised for an unknown entity kind or an operation on the wrong variant."""


class NotAContainerError(MemFSError):
    """Raised when a container is required but the entity cannot hold children."""


class InvalidContainmentError(MemFSError):
    """Raised when a container's policy rejects a child (e.g., zip files)."""


class InvalidPathError(MemFSError):
    """Raised when a path string or an entity name is malformed."""


class InvalidMoveError(MemFSError):
    """Raised when a move would place a container inside its own subtree."""


class SnapshotError(MemFSError):
    """Raised when a namespace snapshot cannot be saved or loaded."""

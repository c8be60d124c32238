"""memfs public API."""

from __future__ import annotations

from memfs.errors import (
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
from memfs.models import (
    Container,
    Drive,
    Entity,
    EntityInfo,
    EntityKind,
    Folder,
    TextFile,
    ZipFile,
)
from memfs.namespace import NamespaceManager
from memfs.util.paths import SEPARATOR

__all__ = [
    # High-level
    "NamespaceManager",
    "SEPARATOR",
    # Models
    "EntityKind",
    "Entity",
    "Container",
    "Drive",
    "Folder",
    "ZipFile",
    "TextFile",
    "EntityInfo",
    # Errors
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

"""Public model exports for memfs."""

from __future__ import annotations

from .entities import (
    Container,
    Drive,
    Entity,
    Folder,
    TextFile,
    ZipFile,
    clone_entity,
    create_entity,
)
from .entity_info import EntityInfo
from .kinds import EntityKind

__all__ = [
    "EntityKind",
    "Entity",
    "Container",
    "Drive",
    "Folder",
    "ZipFile",
    "TextFile",
    "EntityInfo",
    "create_entity",
    "clone_entity",
]

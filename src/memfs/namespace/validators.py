"""Precondition checks for NamespaceManager (run before any mutation)."""

from __future__ import annotations

from memfs.errors import (
    AlreadyExistsError,
    InvalidMoveError,
    InvalidTypeError,
    NotAContainerError,
)
from memfs.models import Container, Entity, EntityKind, TextFile


def validate_is_container(entity: Entity, what: str) -> Container:
    if not isinstance(entity, Container):
        raise NotAContainerError(
            f"{what} cannot contain children: {entity.path}",
            details={"path": entity.path, "kind": entity.kind.value},
        )
    return entity


def validate_is_text_file(entity: Entity) -> TextFile:
    if not isinstance(entity, TextFile):
        raise InvalidTypeError(
            f"Not a text file: {entity.path}",
            details={"path": entity.path, "kind": entity.kind.value},
        )
    return entity


def validate_name_free(container: Container, name: str) -> None:
    if container.has_child(name):
        raise AlreadyExistsError(
            f"Path already exists: {name}",
            details={"parent": container.path, "name": name},
        )


def validate_not_drive(entity: Entity, action: str) -> None:
    if entity.kind is EntityKind.DRIVE:
        raise InvalidTypeError(
            f"Cannot {action} a drive: {entity.name}",
            details={"path": entity.path, "action": action},
        )


def validate_move_no_cycle(source: Entity, destination: Container) -> None:
    """
    Reject cycles: if source appears on the ancestor chain of destination.

    Walk from destination towards its drive following parents; hitting the
    source means the move would detach the subtree from every drive.
    """
    node: Entity | None = destination
    while node is not None:
        if node is source:
            raise InvalidMoveError(
                "MOVE would place an entity inside its own subtree",
                details={"source": source.path, "destination": destination.path},
            )
        node = node.parent

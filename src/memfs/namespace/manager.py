"""NamespaceManager: drive registry, path resolution and all mutations."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
from typing import IO, Any, Iterator, Optional, Union

from memfs.errors import (
    AlreadyExistsError,
    InvalidPathError,
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
    clone_entity,
    create_entity,
)
from memfs.util.paths import split_path, validate_name

from .snapshot import dump_registry, load_registry
from .validators import (
    validate_is_container,
    validate_is_text_file,
    validate_move_no_cycle,
    validate_name_free,
    validate_not_drive,
)

logger = logging.getLogger(__name__)

SnapshotHandle = Union[str, "os.PathLike[str]", IO[str]]


class NamespaceManager:
    """
    In-memory forest of drives addressed by backslash-separated paths.

    Every public operation validates all of its preconditions before the first
    mutation, so a failed call leaves the namespace unchanged.

    Notes:
        - Children and drives are kept in insertion order; `list`, `search`
          and `walk` report in that order (pre-order for the latter two).
        - With thread_safe=True (default) a single re-entrant lock guards the
          whole registry for the duration of each operation.
    """

    def __init__(
        self,
        *,
        thread_safe: bool = True,
        snapshot_indent: Optional[int] = 2,
    ) -> None:
        self._drives: dict[str, Drive] = {}
        self._lock: Optional[threading.RLock] = threading.RLock() if thread_safe else None
        self._snapshot_indent = snapshot_indent

    # ----------------------------
    # Read APIs
    # ----------------------------
    def resolve(self, path: str) -> Entity:
        """
        Resolve a path to its entity.

        Raises:
            InvalidPathError: if the path is empty or its first segment is empty.
            NotFoundError: if the drive or a segment does not exist.
            NotAContainerError: if a non-final segment is a text file.
        """
        with self._guard():
            return self._resolve(path)

    def exists(self, path: str) -> bool:
        with self._guard():
            try:
                self._resolve(path)
            except (NotFoundError, NotAContainerError, InvalidPathError):
                return False
            return True

    def drives(self) -> list[Drive]:
        with self._guard():
            return list(self._drives.values())

    def list(self, path: str) -> list[Entity]:
        """Return the direct children of the container at `path` (a new list)."""
        with self._guard():
            container = validate_is_container(self._resolve(path), "Entity")
            return container.children()

    def stat(self, path: str) -> EntityInfo:
        with self._guard():
            return self._resolve(path).info()

    def read_file(self, path: str) -> str:
        with self._guard():
            return validate_is_text_file(self._resolve(path)).content

    def search(self, name: str) -> list[str]:
        """Full paths of every entity named exactly `name`, across all drives."""
        with self._guard():
            return [entity.path for entity in self._iter_all() if entity.name == name]

    def walk(self, path: Optional[str] = None) -> list[Entity]:
        """
        Pre-order listing of the subtree at `path` (the whole forest if None).

        The root of the subtree is included.
        """
        with self._guard():
            if path is None:
                return list(self._iter_all())
            return list(_iter_subtree(self._resolve(path)))

    # ----------------------------
    # Mutation APIs
    # ----------------------------
    def create(self, kind: EntityKind | str, name: str, parent_path: str = "") -> Entity:
        """
        Create a drive (parent_path ignored) or a child of the container at
        `parent_path`.

        Checks run in order: parent resolves, parent is a container, name is
        free, kind is known.

        Raises:
            InvalidPathError: malformed name or parent path.
            NotFoundError: parent path does not exist.
            NotAContainerError: parent is a text file.
            AlreadyExistsError: name taken in the drive registry or the parent.
            InvalidTypeError: unknown kind.
            InvalidContainmentError: parent is a zip file and kind is not textfile.
        """
        validate_name(name)

        with self._guard():
            if isinstance(kind, str) and kind.lower() == EntityKind.DRIVE.value:
                if name in self._drives:
                    raise AlreadyExistsError(
                        f"Drive already exists: {name}",
                        details={"name": name},
                    )
                drive = Drive(name)
                self._drives[name] = drive
                logger.debug("Created drive %r", name)
                return drive

            parent = validate_is_container(self._resolve(parent_path), "Parent")
            validate_name_free(parent, name)

            entity = create_entity(kind, name, parent)
            parent.add_child(entity)
            logger.debug("Created %s %r", entity.kind.value, entity.path)
            return entity

    def delete(self, path: str) -> None:
        """Delete the entity at `path` together with its whole subtree."""
        with self._guard():
            entity = self._resolve(path)
            if entity.kind is EntityKind.DRIVE:
                del self._drives[entity.name]
            else:
                self._parent_of(entity).remove_child(entity.name)
            logger.debug("Deleted %s %r", entity.kind.value, path)

    def move(self, source_path: str, destination_path: str) -> None:
        """
        Move the entity at `source_path` into the container at `destination_path`.

        Raises:
            NotAContainerError: destination cannot hold children.
            InvalidTypeError: source is a drive.
            AlreadyExistsError: destination already has a child with that name.
            InvalidContainmentError: destination's policy rejects the source.
            InvalidMoveError: destination lies inside the source's subtree.
        """
        with self._guard():
            source = self._resolve(source_path)
            destination = validate_is_container(self._resolve(destination_path), "Destination")

            validate_not_drive(source, "move")
            validate_name_free(destination, source.name)
            destination.check_accepts(source)
            validate_move_no_cycle(source, destination)

            self._parent_of(source).remove_child(source.name)
            source.set_parent(destination)
            destination.add_child(source)
            logger.debug("Moved %r to %r", source_path, source.path)

    def copy(self, source_path: str, destination_path: str) -> Entity:
        """
        Deep-copy the entity at `source_path` into `destination_path`.

        The clone shares no entity with the original; it gets fresh ids and
        timestamps. Raises the same errors as `move` except InvalidMoveError.
        """
        with self._guard():
            source = self._resolve(source_path)
            destination = validate_is_container(self._resolve(destination_path), "Destination")

            validate_not_drive(source, "copy")
            validate_name_free(destination, source.name)
            destination.check_accepts(source)

            clone = clone_entity(source, destination)
            destination.add_child(clone)
            logger.debug("Copied %r to %r", source_path, clone.path)
            return clone

    def rename(self, path: str, new_name: str) -> None:
        """
        Rename the entity at `path`; descendants follow through the parent chain.

        Renaming to the current name collides with the entity itself and raises
        AlreadyExistsError.
        """
        with self._guard():
            entity = self._resolve(path)
            validate_name(new_name)

            old_name = entity.name
            if entity.kind is EntityKind.DRIVE:
                if new_name in self._drives:
                    raise AlreadyExistsError(
                        f"Drive with name already exists: {new_name}",
                        details={"name": new_name},
                    )
                self._drives = {
                    (new_name if key == old_name else key): value
                    for key, value in self._drives.items()
                }
            else:
                parent = self._parent_of(entity)
                validate_name_free(parent, new_name)
                parent.rekey_child(old_name, new_name)

            entity.name = new_name
            logger.debug("Renamed %r to %r", path, entity.path)

    def write_to_file(self, path: str, content: str) -> None:
        """Replace the content of the text file at `path`."""
        with self._guard():
            text_file = validate_is_text_file(self._resolve(path))
            text_file.set_content(content)
            logger.debug("Wrote %d chars to %r", text_file.size, path)

    def clear(self) -> None:
        """Drop every drive."""
        with self._guard():
            self._drives = {}

    # ----------------------------
    # Snapshot persistence
    # ----------------------------
    def save_to_disk(self, handle: SnapshotHandle) -> None:
        """
        Write a snapshot of the whole registry to a path or text file object.

        Paths are written through a temp file in the same directory and
        renamed into place.
        """
        with self._guard():
            payload = dump_registry(self._drives)

        text = json.dumps(payload, indent=self._snapshot_indent, ensure_ascii=False)
        try:
            if hasattr(handle, "write"):
                handle.write(text)  # type: ignore[union-attr]
            else:
                _write_atomic(os.fspath(handle), text)  # type: ignore[arg-type]
        except (OSError, TypeError) as exc:
            raise SnapshotError(
                "Error saving to disk",
                details={"handle": repr(handle)},
                cause=exc,
            ) from exc
        logger.info("Namespace saved to disk (%d entities)", len(payload["entities"]))

    def load_from_disk(self, handle: SnapshotHandle) -> None:
        """
        Replace the whole registry with the snapshot read from `handle`.

        Nothing is merged; on any failure the current registry is kept.
        """
        try:
            if hasattr(handle, "read"):
                text = handle.read()  # type: ignore[union-attr]
            else:
                with open(os.fspath(handle), encoding="utf-8") as f:  # type: ignore[arg-type]
                    text = f.read()
            payload: Any = json.loads(text)
        except (OSError, TypeError, ValueError) as exc:
            raise SnapshotError(
                "Error loading from disk",
                details={"handle": repr(handle)},
                cause=exc,
            ) from exc

        drives = load_registry(payload)
        with self._guard():
            self._drives = drives
        logger.info("Namespace loaded from disk (%d drives)", len(drives))

    # ----------------------------
    # Internals
    # ----------------------------
    def _guard(self) -> contextlib.AbstractContextManager[Any]:
        if self._lock is None:
            return contextlib.nullcontext()
        return self._lock

    def _resolve(self, path: str) -> Entity:
        parts = split_path(path)

        drive = self._drives.get(parts[0])
        if drive is None:
            raise NotFoundError(
                f"Drive not found: {parts[0]}",
                details={"path": path, "segment": parts[0]},
            )

        current: Entity = drive
        for part in parts[1:]:
            container = validate_is_container(current, "Entity")
            child = container.get_child(part)
            if child is None:
                raise NotFoundError(
                    f"Path not found: {part}",
                    details={"path": path, "segment": part},
                )
            current = child
        return current

    def _iter_all(self) -> Iterator[Entity]:
        for drive in self._drives.values():
            yield from _iter_subtree(drive)

    @staticmethod
    def _parent_of(entity: Entity) -> Container:
        parent = entity.parent
        if parent is None:
            raise NotFoundError(
                f"Entity is detached from the namespace: {entity.name}",
                details={"name": entity.name},
            )
        return parent


def _iter_subtree(root: Entity) -> Iterator[Entity]:
    stack: list[Entity] = [root]
    while stack:
        entity = stack.pop()
        yield entity
        if isinstance(entity, Container):
            stack.extend(reversed(entity.children()))


def _write_atomic(path: str, text: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".memfs-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.remove(tmp_path)
        raise

"""Entity variants: drives, folders, zip files (containers) and text files (leaves)."""

from __future__ import annotations

import weakref
from datetime import datetime
from typing import ClassVar, Optional

from memfs.errors import (
    AlreadyExistsError,
    InvalidContainmentError,
    InvalidTypeError,
    NotFoundError,
)
from memfs.util.ids import new_entity_id
from memfs.util.paths import join_path, validate_name
from memfs.util.time import now_utc

from .entity_info import EntityInfo
from .kinds import EntityKind


class Entity:
    """
    Common base for every node in the namespace.

    The parent is held through a weak reference: the container owns its
    children, a child only points back at its owner. `path` is computed from
    the parent chain on every access.
    """

    kind: ClassVar[EntityKind]
    is_container: ClassVar[bool] = False

    def __init__(
        self,
        name: str,
        parent: Optional[Container] = None,
        *,
        entity_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        validate_name(name)
        now = now_utc()
        self.entity_id = entity_id or new_entity_id()
        self.name = name
        self.size = 0
        self.created_at = created_at or now
        self.updated_at = updated_at or now
        self._parent_ref: Optional[weakref.ReferenceType[Container]] = None
        if parent is not None:
            self._parent_ref = weakref.ref(parent)

    @property
    def parent(self) -> Optional[Container]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def set_parent(self, parent: Container) -> None:
        self._parent_ref = weakref.ref(parent)
        self.updated_at = now_utc()

    @property
    def path(self) -> str:
        names: list[str] = []
        node: Optional[Entity] = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return join_path(*reversed(names))

    def info(self) -> EntityInfo:
        return EntityInfo(
            entity_id=self.entity_id,
            name=self.name,
            path=self.path,
            kind=self.kind,
            size=self.size,
            created_at=self.created_at,
            updated_at=self.updated_at,
            child_count=None,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, path={self.path!r})"


class Container(Entity):
    """Entity that holds uniquely named children, kept in insertion order."""

    is_container: ClassVar[bool] = True

    def __init__(self, name: str, parent: Optional[Container] = None, **kwargs) -> None:
        super().__init__(name, parent, **kwargs)
        self._children: dict[str, Entity] = {}

    def accepts(self, entity: Entity) -> bool:
        """Containment policy; general containers accept any non-drive entity."""
        return entity.kind is not EntityKind.DRIVE

    def check_accepts(self, entity: Entity) -> None:
        if not self.accepts(entity):
            raise InvalidContainmentError(
                f"{self.kind.value} cannot contain a {entity.kind.value}",
                details={
                    "container": self.path,
                    "container_kind": self.kind.value,
                    "child_kind": entity.kind.value,
                },
            )

    def add_child(self, child: Entity) -> None:
        self.check_accepts(child)
        if child.name in self._children:
            raise AlreadyExistsError(
                f"Path already exists: {child.name}",
                details={"parent": self.path, "name": child.name},
            )
        self._children[child.name] = child

    def remove_child(self, name: str) -> Entity:
        try:
            return self._children.pop(name)
        except KeyError as exc:
            raise NotFoundError(
                f"Path not found: {name}",
                details={"parent": self.path, "name": name},
                cause=exc,
            ) from exc

    def get_child(self, name: str) -> Optional[Entity]:
        return self._children.get(name)

    def has_child(self, name: str) -> bool:
        return name in self._children

    def children(self) -> list[Entity]:
        return list(self._children.values())

    def rekey_child(self, old_name: str, new_name: str) -> None:
        """Move the entry for `old_name` to `new_name`, keeping its position."""
        if old_name == new_name:
            return
        if new_name in self._children:
            raise AlreadyExistsError(
                f"Path already exists: {new_name}",
                details={"parent": self.path, "name": new_name},
            )
        if old_name not in self._children:
            raise NotFoundError(
                f"Path not found: {old_name}",
                details={"parent": self.path, "name": old_name},
            )
        self._children = {
            (new_name if key == old_name else key): value
            for key, value in self._children.items()
        }

    @property
    def child_count(self) -> int:
        return len(self._children)

    def info(self) -> EntityInfo:
        return EntityInfo(
            entity_id=self.entity_id,
            name=self.name,
            path=self.path,
            kind=self.kind,
            size=self.size,
            created_at=self.created_at,
            updated_at=self.updated_at,
            child_count=self.child_count,
        )


class Drive(Container):
    """Root container. Registered by name with the manager; never has a parent."""

    kind: ClassVar[EntityKind] = EntityKind.DRIVE

    def __init__(self, name: str, **kwargs) -> None:
        super().__init__(name, None, **kwargs)

    def set_parent(self, parent: Container) -> None:
        raise InvalidTypeError(
            "A drive cannot have a parent",
            details={"drive": self.name, "parent": parent.path},
        )


class Folder(Container):
    kind: ClassVar[EntityKind] = EntityKind.FOLDER


class ZipFile(Container):
    """Archive container: holds text files only (no actual compression)."""

    kind: ClassVar[EntityKind] = EntityKind.ZIPFILE

    def accepts(self, entity: Entity) -> bool:
        return entity.kind is EntityKind.TEXTFILE


class TextFile(Entity):
    """Leaf holding mutable string content; `size` tracks the content length."""

    kind: ClassVar[EntityKind] = EntityKind.TEXTFILE

    def __init__(self, name: str, parent: Optional[Container] = None, **kwargs) -> None:
        super().__init__(name, parent, **kwargs)
        self.content = ""

    def set_content(self, content: str) -> None:
        if not isinstance(content, str):
            raise InvalidTypeError(
                "Text file content must be a string",
                details={"path": self.path, "type": type(content).__name__},
            )
        self.content = content
        self.size = len(content)
        self.updated_at = now_utc()


_CHILD_CLASSES: dict[EntityKind, type[Entity]] = {
    EntityKind.FOLDER: Folder,
    EntityKind.TEXTFILE: TextFile,
    EntityKind.ZIPFILE: ZipFile,
}


def create_entity(kind: EntityKind | str, name: str, parent: Container) -> Entity:
    """
    Construct a non-drive entity parented to `parent`.

    The entity is not inserted; the caller adds it with `parent.add_child`.

    Raises:
        InvalidTypeError: if `kind` is unknown or is `drive`.
    """
    parsed = EntityKind.parse(kind)
    cls = _CHILD_CLASSES.get(parsed)
    if cls is None:
        raise InvalidTypeError(
            f"Invalid entity type for a child: {parsed.value}",
            details={"kind": parsed.value, "parent": parent.path},
        )
    return cls(name, parent)


def clone_entity(original: Entity, parent: Container) -> Entity:
    """
    Deep-copy `original` as a child of `parent` (not inserted).

    Every clone gets a fresh id and fresh timestamps. Containers re-insert each
    cloned child through `add_child`, so containment policy is re-validated.
    The subtree is walked with an explicit stack, so nesting depth is not
    bounded by the interpreter's recursion limit. The clone is complete before
    the caller attaches it, so copying a container into its own subtree
    terminates.
    """
    root = _clone_node(original, parent)
    stack: list[tuple[Entity, Entity]] = [(original, root)]
    while stack:
        source, clone = stack.pop()
        if not isinstance(source, Container):
            continue
        for child in source.children():
            child_clone = _clone_node(child, clone)  # type: ignore[arg-type]
            clone.add_child(child_clone)  # type: ignore[attr-defined]
            stack.append((child, child_clone))
    return root


def _clone_node(original: Entity, parent: Container) -> Entity:
    if original.kind is EntityKind.TEXTFILE:
        leaf = TextFile(original.name, parent)
        leaf.set_content(original.content)  # type: ignore[attr-defined]
        return leaf

    if original.kind in (EntityKind.FOLDER, EntityKind.ZIPFILE):
        return _CHILD_CLASSES[original.kind](original.name, parent)

    raise InvalidTypeError(
        f"Unsupported entity type for copy: {original.kind.value}",
        details={"path": original.path, "kind": original.kind.value},
    )

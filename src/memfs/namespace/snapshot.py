"""Whole-registry snapshot codec (JSON-compatible dicts)."""

from __future__ import annotations

from collections import deque
from typing import Any, Optional

from memfs.errors import MemFSError, SnapshotError
from memfs.models import Container, Drive, Entity, EntityKind, Folder, TextFile, ZipFile
from memfs.util.time import parse_rfc3339, to_rfc3339

SNAPSHOT_FORMAT: str = "memfs-snapshot"
SNAPSHOT_VERSION: int = 1

_CONTAINER_CLASSES: dict[EntityKind, type[Container]] = {
    EntityKind.FOLDER: Folder,
    EntityKind.ZIPFILE: ZipFile,
}


def dump_registry(drives: dict[str, Drive]) -> dict[str, Any]:
    """
    Serialize every drive into a JSON-compatible dict.

    Entities are written as a flat list in pre-order (drives in registration
    order, children in insertion order); each entry names its parent by id
    (`None` for drives). The flat layout keeps the document depth constant
    however deep the tree is.
    """
    entities: list[dict[str, Any]] = []
    stack: list[Entity] = list(reversed(list(drives.values())))
    while stack:
        entity = stack.pop()
        entities.append(_dump_entity(entity))
        if isinstance(entity, Container):
            stack.extend(reversed(entity.children()))

    return {
        "format": SNAPSHOT_FORMAT,
        "version": SNAPSHOT_VERSION,
        "entities": entities,
    }


def load_registry(payload: Any) -> dict[str, Drive]:
    """
    Rebuild a drive registry from `dump_registry` output.

    Entries may appear in any order: drives keep the order of their entries
    and siblings keep their relative order. The result is built from scratch;
    callers swap it in only on success.

    Raises:
        SnapshotError: if the payload is malformed or violates an invariant.
    """
    if not isinstance(payload, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    if payload.get("format") != SNAPSHOT_FORMAT:
        raise SnapshotError(
            "Unknown snapshot format",
            details={"format": payload.get("format")},
        )
    if payload.get("version") != SNAPSHOT_VERSION:
        raise SnapshotError(
            "Unsupported snapshot version",
            details={"version": payload.get("version")},
        )

    nodes = payload.get("entities")
    if not isinstance(nodes, list):
        raise SnapshotError("Snapshot 'entities' must be a list")

    try:
        return _build_registry(nodes)
    except SnapshotError:
        raise
    except (MemFSError, KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"Malformed snapshot: {exc}", cause=exc) from exc


def _dump_entity(entity: Entity) -> dict[str, Any]:
    parent = entity.parent
    node: dict[str, Any] = {
        "id": entity.entity_id,
        "parent": parent.entity_id if parent is not None else None,
        "kind": entity.kind.value,
        "name": entity.name,
        "size": entity.size,
        "created_at": to_rfc3339(entity.created_at),
        "updated_at": to_rfc3339(entity.updated_at),
    }
    if isinstance(entity, TextFile):
        node["content"] = entity.content
    return node


def _build_registry(nodes: list[Any]) -> dict[str, Drive]:
    roots: list[dict[str, Any]] = []
    children_by_parent: dict[str, list[dict[str, Any]]] = {}
    seen_ids: set[str] = set()

    for node in nodes:
        if not isinstance(node, dict):
            raise SnapshotError("Snapshot entry must be an object")
        entity_id = node["id"]
        if not isinstance(entity_id, str) or not entity_id:
            raise SnapshotError("Snapshot entry id must be a non-empty string")
        if entity_id in seen_ids:
            raise SnapshotError("Duplicate entity id in snapshot", details={"id": entity_id})
        seen_ids.add(entity_id)

        parent_id = node["parent"]
        if parent_id is None:
            roots.append(node)
        else:
            children_by_parent.setdefault(parent_id, []).append(node)

    drives: dict[str, Drive] = {}
    q: deque[tuple[dict[str, Any], Optional[Container]]] = deque(
        (node, None) for node in roots
    )
    built = 0

    while q:
        node, parent = q.popleft()
        entity = _load_entity(node, parent)
        built += 1

        if parent is None:
            if entity.name in drives:
                raise SnapshotError(
                    f"Duplicate drive in snapshot: {entity.name}",
                    details={"name": entity.name},
                )
            drives[entity.name] = entity  # type: ignore[assignment]
        else:
            parent.add_child(entity)

        child_nodes = children_by_parent.get(entity.entity_id, [])
        if child_nodes and not isinstance(entity, Container):
            raise SnapshotError(
                "Text file entry cannot have children",
                details={"id": entity.entity_id},
            )
        for child_node in child_nodes:
            q.append((child_node, entity))  # type: ignore[arg-type]

    if built != len(seen_ids):
        raise SnapshotError(
            "Snapshot entries are not reachable from any drive",
            details={"unreachable": len(seen_ids) - built},
        )
    return drives


def _load_entity(node: dict[str, Any], parent: Optional[Container]) -> Entity:
    kind = EntityKind.parse(node["kind"])
    meta = {
        "entity_id": node["id"],
        "created_at": parse_rfc3339(node["created_at"]),
        "updated_at": parse_rfc3339(node["updated_at"]),
    }

    if kind is EntityKind.DRIVE:
        if parent is not None:
            raise SnapshotError("Drive nested under a container", details={"name": node["name"]})
        return Drive(node["name"], **meta)

    if parent is None:
        raise SnapshotError("Top-level snapshot entry must be a drive", details={"kind": kind.value})

    if kind is EntityKind.TEXTFILE:
        content = node.get("content", "")
        if not isinstance(content, str):
            raise SnapshotError("Text file content must be a string", details={"id": node["id"]})
        leaf = TextFile(node["name"], parent, **meta)
        leaf.content = content
        leaf.size = len(content)
        return leaf

    return _CONTAINER_CLASSES[kind](node["name"], parent, **meta)

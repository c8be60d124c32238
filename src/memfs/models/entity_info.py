"""Read-only metadata view of an entity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .kinds import EntityKind


@dataclass(slots=True, frozen=True)
class EntityInfo:
    """
    Snapshot of an entity's metadata at the time it was taken.

    Notes:
        - `child_count` is None for leaves (text files).
        - Later mutations of the entity are not reflected.
    """

    entity_id: str
    name: str
    path: str
    kind: EntityKind
    size: int
    created_at: datetime
    updated_at: datetime

    child_count: Optional[int] = None

from __future__ import annotations

import uuid


def new_uuid() -> str:
    """Generate a UUID4 string."""
    return str(uuid.uuid4())


def new_entity_id() -> str:
    """Generate a new identifier for an entity (fresh on create and on copy)."""
    return new_uuid()

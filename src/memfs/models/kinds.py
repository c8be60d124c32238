"""Entity kinds for memfs."""

from __future__ import annotations

from enum import Enum

from memfs.errors import InvalidTypeError


class EntityKind(str, Enum):
    """Closed set of entity variants."""

    DRIVE = "drive"
    FOLDER = "folder"
    TEXTFILE = "textfile"
    ZIPFILE = "zipfile"

    @classmethod
    def parse(cls, value: "EntityKind | str") -> "EntityKind":
        """Return the kind for `value`, comparing strings case-insensitively."""
        if isinstance(value, EntityKind):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError as exc:
                raise InvalidTypeError(
                    f"Invalid entity type: {value}",
                    details={"kind": value},
                    cause=exc,
                ) from exc
        raise InvalidTypeError(f"Invalid entity type: {value!r}", details={"kind": value})

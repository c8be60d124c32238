from __future__ import annotations

from memfs.errors import InvalidPathError

SEPARATOR: str = "\\"


def split_path(path: str) -> list[str]:
    """
    Split a path into its segments.

    The first segment names a drive. Trailing empty segments are dropped, so
    "C\\Docs\\" addresses the same entity as "C\\Docs".
    """
    if not isinstance(path, str):
        raise InvalidPathError("Path must be a string", details={"path": path})

    parts = path.split(SEPARATOR)
    while parts and not parts[-1]:
        parts.pop()

    if not parts or not parts[0]:
        raise InvalidPathError(f"Invalid path: {path!r}", details={"path": path})
    return parts


def join_path(*segments: str) -> str:
    return SEPARATOR.join(segments)


def validate_name(name: str) -> None:
    """Names must be non-empty and must not contain the separator."""
    if not isinstance(name, str) or not name:
        raise InvalidPathError("Name must be a non-empty string", details={"name": name})
    if SEPARATOR in name:
        raise InvalidPathError(
            f"Name must not contain the path separator: {name!r}",
            details={"name": name, "separator": SEPARATOR},
        )

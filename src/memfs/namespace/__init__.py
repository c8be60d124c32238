"""Namespace manager exports for memfs."""

from __future__ import annotations

from .manager import NamespaceManager
from .snapshot import SNAPSHOT_FORMAT, SNAPSHOT_VERSION, dump_registry, load_registry

__all__ = [
    "NamespaceManager",
    "SNAPSHOT_FORMAT",
    "SNAPSHOT_VERSION",
    "dump_registry",
    "load_registry",
]

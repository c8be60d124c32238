from .ids import new_entity_id, new_uuid
from .paths import SEPARATOR, join_path, split_path, validate_name
from .time import normalize_dt, now_utc, parse_rfc3339, to_rfc3339

__all__ = [
    "new_uuid",
    "new_entity_id",
    "SEPARATOR",
    "split_path",
    "join_path",
    "validate_name",
    "now_utc",
    "parse_rfc3339",
    "to_rfc3339",
    "normalize_dt",
]

# subsonic_adapter/io/serialize.py

"""Plain-dict conversion of domain entities for JSON output."""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def _value_to_raw(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return entity_to_dict(value)
    if isinstance(value, (list, tuple)):
        return [_value_to_raw(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


def entity_to_dict(entity: Any) -> dict[str, Any]:
    """Convert an entity to a dict, leaving out optional fields that are None."""
    result: dict[str, Any] = {}
    for field in fields(entity):
        value = getattr(entity, field.name)
        if value is None:
            continue
        result[field.name] = _value_to_raw(value)
    return result


def to_json(value: Any, *, indent: int | None = 2) -> str:
    """Serialize an entity or a list of entities to JSON text."""
    return json.dumps(_value_to_raw(value), ensure_ascii=False, indent=indent)

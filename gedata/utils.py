import dataclasses
import re
import time
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel

from gedata.constants import DATE_FORMAT, KEY_PATTERN
from gedata.errors import SerializationError

# Up to 50 letters, digits or underscores, starting with '$' or a letter
key_pattern = re.compile(KEY_PATTERN)


def check_pattern(name: str) -> bool:
    return bool(key_pattern.match(name))


def invalid_keys(properties: Mapping[str, Any]) -> List[str]:
    """
    Return the property keys that do not match the allowed key pattern.
    """
    return [key for key in properties if not isinstance(key, str) or not check_pattern(key)]


def merge_properties(target: Dict[str, Any], source: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if source:
        for key, value in source.items():
            target[key] = value
    return target


def now_ms() -> int:
    return int(time.time() * 1000)


def format_datetime(value: datetime) -> str:
    # milliseconds precision
    return value.strftime(DATE_FORMAT)[:-3]


def normalize_value(value: Any) -> Any:
    """
    Convert a property value to a JSON-ready value.

    Supported values are str, int, float, bool, None, datetime, date, Decimal,
    Enum, mappings with string keys, sequences and sets, dataclass instances and
    pydantic models. Containers are normalized recursively.

    Raises:
        SerializationError: If the value (or a nested value) is not supported.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value

    if isinstance(value, datetime):
        return format_datetime(value)

    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, Decimal):
        return float(value)

    if isinstance(value, Enum):
        return normalize_value(value.value)

    if isinstance(value, BaseModel):
        return normalize_value(value.model_dump())

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return normalize_value(
            {field.name: getattr(value, field.name) for field in dataclasses.fields(value)}
        )

    if isinstance(value, Mapping):
        normalized = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(
                    reason=f"mapping keys must be strings, got {type(key).__name__}"
                )
            normalized[key] = normalize_value(item)
        return normalized

    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_value(item) for item in value]

    raise SerializationError(reason=f"unsupported property type {type(value).__name__}")


def normalize_properties(properties: Mapping[str, Any]) -> Dict[str, Any]:
    return normalize_value(dict(properties))

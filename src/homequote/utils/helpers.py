"""
General helper functions
"""
import re
import uuid
from typing import Any, Dict
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Generate a string UUID primary key"""
    return str(uuid.uuid4())


def remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Remove None values from dictionary"""
    return {k: v for k, v in data.items() if v is not None}


def to_float(value: Any, default: float = 0.0) -> float:
    """Lenient numeric parse for prices stored in JSON documents"""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_int(value: Any, default: int = 0) -> int:
    """Lenient integer parse for quantities stored in JSON documents"""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


_HOST_LABEL = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def is_host_label(value: str) -> bool:
    """One DNS label: lower-case letters, digits and inner hyphens, at most 63 characters"""
    return bool(_HOST_LABEL.match(value))


def is_hostname(value: str) -> bool:
    """Dot-separated host labels, at most 253 characters in total"""
    if not value or len(value) > 253:
        return False
    return all(is_host_label(label) for label in value.split("."))

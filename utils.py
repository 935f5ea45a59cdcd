from datetime import datetime, timezone
from typing import Container, Optional

from exceptions import ValidationError


def timestamp() -> float:
    return datetime.now(timezone.utc).timestamp()


def new_id(existing: Container[str], prefix: str = "", now: Optional[float] = None) -> str:
    """Build an id from the creation time in milliseconds, bumped until unused."""
    value = int((timestamp() if now is None else now) * 1000)
    candidate = f"{prefix}{value}"
    while candidate in existing:
        value += 1
        candidate = f"{prefix}{value}"
    return candidate


def start_of_day(ts: float) -> float:
    day = datetime.fromtimestamp(ts, timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return day.timestamp()


def require_text(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} cannot be empty")
    return value

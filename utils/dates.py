"""
Timestamp helpers. Records store UTC timestamps as ISO-8601 strings.
"""
from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc)


def to_iso(value):
    if value is None:
        return None
    return value.isoformat()


def from_iso(value):
    """Parse an ISO timestamp from a record; naive values are taken as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

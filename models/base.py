from __future__ import annotations
from datetime import datetime, timezone

def utcnow() -> datetime:
    # naive UTC: SQLite drops tzinfo on the way back anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)

def iso_z(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="seconds") + "Z"

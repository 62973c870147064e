from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app
from sqlalchemy import delete

from extensions import db
from models import Broadcast, BroadcastType, utcnow

def _cutoff() -> datetime:
    ttl = int(current_app.config.get("BROADCAST_TTL_SECONDS", 3600))
    return utcnow() - timedelta(seconds=ttl)

def purge_expired() -> int:
    deleted = db.session.execute(delete(Broadcast).where(Broadcast.created_at < _cutoff())).rowcount or 0
    db.session.commit()
    return deleted

def create_broadcast(*, message: str, type: BroadcastType = BroadcastType.REMINDER) -> Broadcast:
    purge_expired()
    b = Broadcast(message=message, type=type.value)
    db.session.add(b)
    db.session.commit()
    current_app.logger.info("broadcast created", extra={"event": "broadcast_created"})
    return b

def latest_broadcast() -> Optional[Broadcast]:
    return (Broadcast.query
            .filter(Broadcast.created_at >= _cutoff())
            .order_by(Broadcast.created_at.desc(), Broadcast.id.desc())
            .first())

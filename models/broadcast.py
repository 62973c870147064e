from __future__ import annotations
from datetime import datetime, timedelta
from enum import Enum

from flask import current_app
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from extensions import db
from .base import utcnow, iso_z

class BroadcastType(str, Enum):
    INFO = "info"
    REMINDER = "reminder"
    ALERT = "alert"

class Broadcast(db.Model):
    __tablename__ = "broadcasts"

    id: Mapped[int] = mapped_column(primary_key=True)
    message: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=BroadcastType.REMINDER.value)
    created_at: Mapped[datetime] = mapped_column(db.DateTime, default=utcnow, nullable=False, index=True)

    @property
    def expires_at(self) -> datetime:
        ttl = int(current_app.config.get("BROADCAST_TTL_SECONDS", 3600))
        return self.created_at + timedelta(seconds=ttl)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "type": self.type,
            "createdAt": iso_z(self.created_at),
            "expiresAt": iso_z(self.expires_at),
        }

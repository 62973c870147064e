from __future__ import annotations
from datetime import datetime

from flask import current_app
from flask_login import UserMixin
from sqlalchemy.orm import Mapped, mapped_column, relationship
from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db
from .base import utcnow

class User(UserMixin, db.Model):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    # always stored lower-cased -> uniqueness is case-insensitive
    email: Mapped[str] = mapped_column(db.String(255), unique=True, index=True, nullable=False)
    pin_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime, default=utcnow, nullable=False)

    orders = relationship("Order", back_populates="user", cascade="all, delete-orphan")

    # helpers
    def set_pin(self, raw: str):
        self.pin_hash = generate_password_hash(raw)

    def check_pin(self, raw: str) -> bool:
        return check_password_hash(self.pin_hash, raw)

    @property
    def is_admin(self) -> bool:
        allowed = current_app.config.get("ADMIN_EMAILS") or []
        return (self.email or "").lower() in {e.lower() for e in allowed}

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "isAdmin": self.is_admin}

    def __repr__(self):
        return f"<User {self.email}>"

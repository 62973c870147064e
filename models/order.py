from __future__ import annotations
from datetime import datetime
from enum import Enum

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db
from .base import utcnow, iso_z

class Drink(str, Enum):
    TEA = "Tea"
    COFFEE = "Coffee"
    MILK = "Milk"
    BLACK_TEA = "Black Tea"
    BLACK_COFFEE = "Black Coffee"

class Sugar(str, Enum):
    WITH_SUGAR = "With Sugar"
    WITHOUT_SUGAR = "Without Sugar"

class Slot(str, Enum):
    MORNING = "11:00 AM"
    AFTERNOON = "03:00 PM"


class Order(db.Model):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # snapshot of the name at placement time
    user_name: Mapped[str] = mapped_column(String(120), nullable=False)
    # strings, not db Enum, so values match the client contract verbatim
    slot: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(db.DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "items": [i.to_dict() for i in self.items],
            "slot": self.slot,
            "createdAt": iso_z(self.created_at),
            "updatedAt": iso_z(self.updated_at),
        }

    def __repr__(self):
        return f"<Order {self.id} {self.slot} user={self.user_id}>"


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    drink: Mapped[str] = mapped_column(String(32), nullable=False)
    sugar: Mapped[str] = mapped_column(String(32), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    note: Mapped[str | None] = mapped_column(String(200))

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "drink": self.drink,
            "sugar": self.sugar,
            "quantity": self.quantity,
            "note": self.note,
        }

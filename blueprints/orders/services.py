# blueprints/orders/services.py
from __future__ import annotations
from typing import Iterable, List

from flask import current_app
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Order, OrderItem, Slot, User, utcnow
from .schemas import OrderItemIn

def _build_items(items: Iterable[OrderItemIn]) -> List[OrderItem]:
    return [
        OrderItem(
            position=pos,
            drink=it.drink.value,
            sugar=it.sugar.value,
            quantity=it.quantity,
            note=it.note,
        )
        for pos, it in enumerate(items)
    ]

def _can_modify(user: User, order: Order) -> bool:
    return order.user_id == user.id or bool(getattr(user, "is_admin", False))

def _get_for_modify(user: User, order_id: int) -> Order:
    order: Order | None = db.session.get(Order, order_id)
    if not order:
        raise LookupError("ORDER_NOT_FOUND")
    if not _can_modify(user, order):
        raise PermissionError("NOT_OWNER")
    return order

def place_orders(*, user: User, items: List[OrderItemIn], slots: List[Slot]) -> List[Order]:
    """
    One Order per slot. Every slot is committed on its own: if a later slot
    fails, the earlier ones stay in place and the error propagates.
    """
    created: List[Order] = []
    for slot in slots:
        order = Order(user_id=user.id, user_name=user.name, slot=slot.value, items=_build_items(items))
        db.session.add(order)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(
                "order placement failed for slot %s", slot.value,
                extra={"event": "order_slot_failed", "user_id": user.id, "count": len(created)},
            )
            raise
        current_app.logger.info("order placed", extra={"event": "order_placed", "user_id": user.id, "order_id": order.id})
        created.append(order)
    return created

def list_orders_for(user: User) -> List[Order]:
    return (Order.query
            .filter(Order.user_id == user.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all())

def list_all_orders() -> List[Order]:
    return Order.query.order_by(Order.created_at.desc(), Order.id.desc()).all()

def update_order_items(*, user: User, order_id: int, items: List[OrderItemIn]) -> Order:
    """Replace the items of an order in place. Last write wins."""
    order = _get_for_modify(user, order_id)
    order.items = _build_items(items)
    order.updated_at = utcnow()
    db.session.commit()
    return order

def delete_order(*, user: User, order_id: int) -> None:
    order = _get_for_modify(user, order_id)
    db.session.delete(order)
    db.session.commit()

def clear_all_orders() -> int:
    """Wipe the board. Used by the admin 'clear board' action and the nightly reset."""
    db.session.execute(delete(OrderItem))
    deleted = db.session.execute(delete(Order)).rowcount or 0
    db.session.commit()
    current_app.logger.info("board cleared", extra={"event": "orders_cleared", "count": deleted})
    return deleted

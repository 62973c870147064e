# blueprints/orders/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from pydantic import ValidationError

from blueprints.auth.routes import admin_required
from . import services as svc
from .schemas import OrderItemsIn, PlaceOrderIn

api_bp = Blueprint("orders_api", __name__)

def _json_err(code: str, http: int, message: str):
    return jsonify({"error": code, "message": message}), http

def _validation_err(ve: ValidationError):
    return jsonify({"error": "validation_error", "message": "Invalid order data",
                    "detail": ve.errors(include_url=False, include_context=False)}), 422

def _me():
    return current_user._get_current_object()

@api_bp.post("/orders")
@login_required
def api_place_order():
    payload = request.get_json(silent=True) or {}
    try:
        data = PlaceOrderIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_err(ve)

    orders = svc.place_orders(user=_me(), items=data.items, slots=data.selected_slots())
    # single-slot form answers with the bare order, like the original client expects
    if data.slot is not None:
        return jsonify(orders[0].to_dict()), 201
    return jsonify({"orders": [o.to_dict() for o in orders]}), 201

@api_bp.get("/orders/my")
@login_required
def api_my_orders():
    return jsonify([o.to_dict() for o in svc.list_orders_for(_me())])

@api_bp.get("/orders")
@admin_required
def api_all_orders():
    return jsonify([o.to_dict() for o in svc.list_all_orders()])

@api_bp.put("/orders/<int:order_id>")
@login_required
def api_update_order(order_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = OrderItemsIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_err(ve)
    try:
        order = svc.update_order_items(user=_me(), order_id=order_id, items=data.items)
    except LookupError:
        return _json_err("not_found", 404, "Order not found")
    except PermissionError:
        return _json_err("forbidden", 403, "You can only edit your own orders")
    return jsonify(order.to_dict())

@api_bp.delete("/orders/<int:order_id>")
@login_required
def api_delete_order(order_id: int):
    try:
        svc.delete_order(user=_me(), order_id=order_id)
    except LookupError:
        return _json_err("not_found", 404, "Order not found")
    except PermissionError:
        return _json_err("forbidden", 403, "You can only delete your own orders")
    return jsonify({"ok": True, "id": order_id})

@api_bp.delete("/orders/all")
@admin_required
def api_clear_orders():
    deleted = svc.clear_all_orders()
    return jsonify({"ok": True, "deleted": deleted})

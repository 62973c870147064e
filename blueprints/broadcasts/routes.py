from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import login_required
from pydantic import BaseModel, ValidationError, field_validator

from blueprints.auth.routes import admin_required
from models import BroadcastType
from . import services as svc

api_bp = Blueprint("broadcasts_api", __name__)

class BroadcastIn(BaseModel):
    message: str
    type: BroadcastType = BroadcastType.REMINDER

    @field_validator("message")
    @classmethod
    def _non_empty(cls, v: str):
        if not v or not v.strip():
            raise ValueError("message_required")
        if len(v) > 500:
            raise ValueError("too_long")
        return v.strip()

@api_bp.post("/broadcasts")
@admin_required
def api_create_broadcast():
    payload = request.get_json(silent=True) or {}
    try:
        data = BroadcastIn.model_validate(payload)
    except ValidationError as ve:
        return jsonify({"error": "validation_error", "message": "Invalid broadcast",
                        "detail": ve.errors(include_url=False, include_context=False)}), 422
    b = svc.create_broadcast(message=data.message, type=data.type)
    return jsonify(b.to_dict()), 201

@api_bp.get("/broadcasts/latest")
@login_required
def api_latest_broadcast():
    b = svc.latest_broadcast()
    return jsonify({"broadcast": b.to_dict() if b else None})

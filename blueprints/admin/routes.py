from __future__ import annotations
import smtplib
from typing import Optional

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required
from pydantic import BaseModel, Field, ValidationError

from blueprints.auth.routes import admin_required
from . import services as svc

api_bp = Blueprint("admin_api", __name__)

class EmailBlastIn(BaseModel):
    subject: Optional[str] = Field("Office drinks reminder", max_length=200)
    message: str = Field(min_length=1, max_length=5000)

@api_bp.post("/admin/email-blast")
@login_required
@admin_required
def email_blast():
    payload = request.get_json(silent=True) or {}
    try:
        data = EmailBlastIn.model_validate(payload)
    except ValidationError as ve:
        return jsonify({"error": "validation_error", "message": "Invalid email blast",
                        "detail": ve.errors(include_url=False, include_context=False)}), 422
    try:
        res = svc.send_email_blast(subject=data.subject or "Office drinks reminder", message=data.message)
    except (smtplib.SMTPException, OSError):
        # could not even reach the mail server
        current_app.logger.exception("mail server unavailable", extra={"event": "email_blast_failed"})
        return jsonify({"error": "mail_unavailable", "message": "Could not send emails"}), 502
    return jsonify({"ok": True, "sent": res.sent, "failed": res.failed})

@api_bp.get("/admin/users")
@login_required
@admin_required
def users():
    return jsonify({"ok": True, "items": [u.to_dict() for u in svc.list_users()]})

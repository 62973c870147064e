# blueprints/auth/routes.py
from __future__ import annotations
import time
from functools import wraps
from typing import Callable, Optional

from flask import Blueprint, request, jsonify, abort, current_app
from flask_login import login_required, current_user
from pydantic import ValidationError

from extensions import db, login_manager
from models import User
from . import services as svc
from .schemas import RegisterIn, ProfileIn

api_bp = Blueprint("auth_api", __name__)

DEFAULT_RL_MAX = 5
DEFAULT_RL_WIN = 300  # 5 minutes

# ---------- user loading ----------
@login_manager.user_loader
def load_user(uid: str) -> Optional[User]:
    try:
        return db.session.get(User, int(uid))
    except (TypeError, ValueError):
        return None

@login_manager.request_loader
def load_user_from_request(req) -> Optional[User]:
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return svc.user_from_token(token.strip())

@login_manager.unauthorized_handler
def _unauth():
    return jsonify({"error": "unauthorized", "message": "Unauthorized"}), 401

# ---------- rate limit ----------
def _rl_key(email: str) -> str:
    ip = request.headers.get("X-Forwarded-For", request.remote_addr or "0.0.0.0").split(",")[0].strip()
    return f"{ip}|{(email or '').lower()}"

def _rl_check_and_hit(email: str) -> bool:
    now = time.time()
    win = current_app.config.get("AUTH_RL_WINDOW", DEFAULT_RL_WIN)
    mx = current_app.config.get("AUTH_RL_MAX", DEFAULT_RL_MAX)
    attempts: dict[str, list[float]] = current_app.extensions.setdefault("login_attempts", {})
    bucket = attempts.setdefault(_rl_key(email), [])
    cutoff = now - win
    while bucket and bucket[0] < cutoff:
        bucket.pop(0)
    if len(bucket) >= mx:
        return False
    bucket.append(now)
    return True

# ---------- role decorators ----------
def admin_required(fn: Callable):
    @wraps(fn)
    @login_required
    def wrapper(*args, **kwargs):
        if not getattr(current_user, "is_admin", False):
            abort(403)
        return fn(*args, **kwargs)
    return wrapper

def _json_err(code: str, http: int, message: str):
    return jsonify({"error": code, "message": message}), http

def _auth_payload(user: User) -> dict:
    return {"token": svc.issue_token(user), "user": user.to_dict()}

# ---------- API ----------
@api_bp.post("/auth/register")
def api_register():
    payload = request.get_json(silent=True) or {}
    try:
        data = RegisterIn.model_validate(payload)
    except ValidationError as ve:
        return jsonify({"error": "validation_error", "message": "Invalid registration data",
                        "detail": ve.errors(include_url=False, include_context=False)}), 422
    try:
        user = svc.register_user(name=data.name, email=str(data.email), pin=data.pin)
    except ValueError:
        return _json_err("email_taken", 400, "Email already exists")
    return jsonify(_auth_payload(user)), 201

@api_bp.post("/auth/login")
def api_login():
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip().lower()
    pin = str(payload.get("pin") or "")

    if not email or not pin:
        return _json_err("missing_credentials", 400, "Email and PIN are required")

    if not _rl_check_and_hit(email):
        return _json_err("too_many_attempts", 429, "Too many login attempts, try again later")

    try:
        user = svc.authenticate(email=email, pin=pin)
    except PermissionError:
        return _json_err("invalid_credentials", 401, "Invalid credentials")
    return jsonify(_auth_payload(user))

@api_bp.get("/auth/me")
@login_required
def api_me():
    return jsonify({"user": current_user.to_dict()})

@api_bp.put("/auth/profile")
@login_required
def api_profile():
    payload = request.get_json(silent=True) or {}
    try:
        data = ProfileIn.model_validate(payload)
    except ValidationError as ve:
        return jsonify({"error": "validation_error", "message": "Invalid profile data",
                        "detail": ve.errors(include_url=False, include_context=False)}), 422
    try:
        user = svc.update_profile(current_user._get_current_object(), name=data.name, email=str(data.email), pin=data.pin)
    except ValueError:
        return _json_err("email_taken", 400, "Email already exists")
    # the email may have changed, so hand out a fresh token
    return jsonify(_auth_payload(user))

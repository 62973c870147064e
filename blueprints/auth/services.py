# blueprints/auth/services.py
from __future__ import annotations
from typing import Optional

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import User

TOKEN_SALT = "auth-token"

def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()

def _email_taken(email: str, exclude_id: Optional[int] = None) -> bool:
    q = User.query.filter(User.email == email)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return db.session.query(q.exists()).scalar()

def _commit_or_email_taken() -> None:
    # a concurrent request can slip past _email_taken; the unique index decides
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("EMAIL_TAKEN")

# ---------- tokens ----------
def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)

def issue_token(user: User) -> str:
    """Signed bearer token carrying the user id and email."""
    return _serializer().dumps({"id": user.id, "email": user.email})

def user_from_token(token: str) -> Optional[User]:
    max_age = current_app.config.get("TOKEN_MAX_AGE")
    try:
        data = _serializer().loads(token, max_age=max_age)
    except (SignatureExpired, BadSignature):
        return None
    if not isinstance(data, dict) or "id" not in data:
        return None
    return db.session.get(User, int(data["id"]))

# ---------- accounts ----------
def register_user(*, name: str, email: str, pin: str) -> User:
    email = _normalize_email(email)
    if _email_taken(email):
        raise ValueError("EMAIL_TAKEN")
    user = User(name=name.strip(), email=email)
    user.set_pin(pin)
    db.session.add(user)
    _commit_or_email_taken()
    current_app.logger.info("user registered", extra={"event": "user_registered", "user_id": user.id})
    return user

def authenticate(*, email: str, pin: str) -> User:
    user: Optional[User] = User.query.filter_by(email=_normalize_email(email)).first()
    if not user or not user.check_pin(pin):
        raise PermissionError("INVALID_CREDENTIALS")
    return user

def update_profile(user: User, *, name: str, email: str, pin: Optional[str] = None) -> User:
    """Name and email are always replaced; an empty pin keeps the old one."""
    email = _normalize_email(email)
    if _email_taken(email, exclude_id=user.id):
        raise ValueError("EMAIL_TAKEN")
    user.name = name.strip()
    user.email = email
    if pin:
        user.set_pin(pin)
    _commit_or_email_taken()
    return user

# blueprints/admin/services.py
from __future__ import annotations
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List

from flask import current_app

from models import User

@dataclass
class BlastResult:
    sent: int
    failed: int

def _build_message(to: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = current_app.config["MAIL_DEFAULT_SENDER"]
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)
    return msg

def outbox() -> List[EmailMessage]:
    """Messages captured instead of sent while MAIL_SUPPRESS_SEND is on."""
    return current_app.extensions.setdefault("mail_outbox", [])

def _open_smtp() -> smtplib.SMTP:
    cfg = current_app.config
    conn = smtplib.SMTP(cfg["MAIL_SERVER"], cfg["MAIL_PORT"], timeout=30)
    try:
        if cfg.get("MAIL_USE_TLS"):
            conn.starttls()
        if cfg.get("MAIL_USERNAME"):
            conn.login(cfg["MAIL_USERNAME"], cfg.get("MAIL_PASSWORD") or "")
    except (smtplib.SMTPException, OSError):
        conn.close()
        raise
    return conn

def send_email_blast(*, subject: str, message: str) -> BlastResult:
    """
    One email per registered user. A recipient that fails is logged and
    counted; there are no retries.
    """
    users = User.query.order_by(User.id.asc()).all()
    result = BlastResult(sent=0, failed=0)
    if not users:
        return result

    if current_app.config.get("MAIL_SUPPRESS_SEND"):
        box = outbox()
        for u in users:
            box.append(_build_message(u.email, subject, message))
            result.sent += 1
    else:
        with _open_smtp() as conn:
            for u in users:
                try:
                    conn.send_message(_build_message(u.email, subject, message))
                    result.sent += 1
                except smtplib.SMTPException:
                    current_app.logger.exception("email to user %s failed", u.id,
                                                 extra={"event": "email_failed", "user_id": u.id})
                    result.failed += 1

    current_app.logger.info("email blast done", extra={"event": "email_blast", "count": result.sent})
    return result

def list_users() -> List[User]:
    return User.query.order_by(User.name.asc(), User.id.asc()).all()

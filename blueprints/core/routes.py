from __future__ import annotations
import json, logging
from datetime import datetime, timezone

from flask import current_app, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response

from extensions import db
from . import bp

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in ("event", "path", "method", "status", "duration_ms", "user_id", "order_id", "count"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _setup_structured_logging(app):
    logger = app.logger
    has_json = any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in logger.handlers
    )
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)

@bp.before_app_request
def _start_timer():
    g._req_start = datetime.now(timezone.utc)

@bp.after_app_request
def _log_request(response: Response):
    try:
        duration_ms = int((datetime.now(timezone.utc) - g._req_start).total_seconds() * 1000)
    except AttributeError:
        duration_ms = None
    current_app.logger.info("request handled", extra={
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
    })
    return response

# ---------- JSON errors ----------
_MESSAGES = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    405: "Method not allowed",
    429: "Too many requests",
}

@bp.app_errorhandler(HTTPException)
def _http_error(e: HTTPException):
    code = e.code or 500
    message = e.description if e.description and code == 400 else _MESSAGES.get(code, e.name)
    return jsonify({"error": e.name.lower().replace(" ", "_"), "message": message}), code

@bp.app_errorhandler(SQLAlchemyError)
def _db_error(e: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.exception("database error", extra={"event": "db_error"})
    return jsonify({"error": "internal_error", "message": "Internal server error"}), 500

@bp.app_errorhandler(500)
def _internal_error(e):
    return jsonify({"error": "internal_error", "message": "Internal server error"}), 500

@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
    })

# blueprints/reports/routes.py
from __future__ import annotations
from datetime import date
from flask import Blueprint, Response, jsonify
from flask_login import login_required
from blueprints.auth.routes import admin_required

from .services import office_summary, summary_csv

api_bp = Blueprint("reports_api", __name__)

def _csv_resp(content: str, filename: str) -> Response:
    return Response(
        content,
        mimetype="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

@api_bp.get("/orders/summary")
@login_required
def summary():
    return jsonify(office_summary())

@api_bp.get("/admin/reports/summary.csv")
@login_required
@admin_required
def summary_export():
    csv_data = summary_csv(office_summary())
    return _csv_resp(csv_data, f"office_summary_{date.today().isoformat()}.csv")

# blueprints/reports/services.py
from __future__ import annotations
from io import StringIO
import csv
from typing import Dict, Iterable, List, Tuple

from models import Order, Slot, Sugar

def _empty_slot_summary() -> Dict[str, int]:
    return {"total": 0, "withSugar": 0}

def build_summary(orders: Iterable[Order]) -> dict:
    """
    Single pass over every item of every order.

    totalDrinks / totalWithSugar: sums of quantities
    morningSummary / afternoonSummary: the same two sums per slot
    table: one row per (drink, sugar) in first-seen order, rows with total 0 dropped
    """
    total_drinks = 0
    total_with_sugar = 0
    per_slot = {
        Slot.MORNING.value: _empty_slot_summary(),
        Slot.AFTERNOON.value: _empty_slot_summary(),
    }
    rows: Dict[Tuple[str, str], dict] = {}

    for order in orders:
        is_morning = order.slot == Slot.MORNING.value
        slot_sum = per_slot[Slot.MORNING.value if is_morning else Slot.AFTERNOON.value]
        for item in order.items:
            qty = item.quantity
            with_sugar = item.sugar == Sugar.WITH_SUGAR.value

            total_drinks += qty
            slot_sum["total"] += qty
            if with_sugar:
                total_with_sugar += qty
                slot_sum["withSugar"] += qty

            key = (item.drink, item.sugar)
            row = rows.get(key)
            if row is None:
                row = rows[key] = {"drink": item.drink, "sugar": item.sugar,
                                   "morningCount": 0, "afternoonCount": 0, "total": 0}
            row["morningCount" if is_morning else "afternoonCount"] += qty
            row["total"] += qty

    return {
        "totalDrinks": total_drinks,
        "totalWithSugar": total_with_sugar,
        "morningSummary": per_slot[Slot.MORNING.value],
        "afternoonSummary": per_slot[Slot.AFTERNOON.value],
        "table": [r for r in rows.values() if r["total"] > 0],
    }

def office_summary() -> dict:
    # oldest first, so table rows follow the order drinks were first asked for
    orders = Order.query.order_by(Order.created_at.asc(), Order.id.asc()).all()
    return build_summary(orders)

def summary_csv(summary: dict) -> str:
    """
    CSV: drink;sugar;morning;afternoon;total  (+ TOTAL row)
    """
    rows: List[Tuple] = [
        (r["drink"], r["sugar"], r["morningCount"], r["afternoonCount"], r["total"])
        for r in summary["table"]
    ]
    buf = StringIO()
    w = csv.writer(buf, delimiter=";")
    w.writerow(["drink", "sugar", "morning", "afternoon", "total"])
    w.writerows(rows)
    w.writerow([
        "TOTAL", "",
        summary["morningSummary"]["total"],
        summary["afternoonSummary"]["total"],
        summary["totalDrinks"],
    ])
    return buf.getvalue()

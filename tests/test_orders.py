from __future__ import annotations
import pytest
from sqlalchemy.exc import OperationalError

from app import create_app
from extensions import db
from models import Order, OrderItem, User, Slot
from blueprints.orders import services as svc
from blueprints.orders.schemas import OrderItemIn

COFFEE = {"drink": "Coffee", "sugar": "With Sugar", "quantity": 2}
TEA = {"drink": "Tea", "sugar": "Without Sugar", "quantity": 1, "note": "  lemon  "}

@pytest.fixture()
def app_ctx():
    app = create_app("test")
    with app.app_context():
        db.create_all()
    return app

@pytest.fixture()
def client(app_ctx):
    return app_ctx.test_client()

def _register(client, name, email, pin="1234"):
    r = client.post("/api/auth/register", json={"name": name, "email": email, "pin": pin})
    assert r.status_code == 201, r.get_json()
    return {"Authorization": f"Bearer {r.get_json()['token']}"}

@pytest.fixture()
def ann(client):
    return _register(client, "Ann", "ann@example.com")

@pytest.fixture()
def bob(client):
    return _register(client, "Bob", "bob@example.com")

@pytest.fixture()
def admin(client):
    return _register(client, "Admin", "admin@example.com", pin="0000")

def _place(client, headers, **body):
    return client.post("/api/orders", headers=headers, json=body)

def test_place_single_slot(client, ann):
    r = _place(client, ann, slot="11:00 AM", items=[COFFEE, TEA])
    assert r.status_code == 201
    js = r.get_json()
    assert js["slot"] == "11:00 AM"
    assert js["userName"] == "Ann"
    assert [i["drink"] for i in js["items"]] == ["Coffee", "Tea"]
    assert js["items"][1]["note"] == "lemon"
    assert js["createdAt"].endswith("Z")

def test_place_both_slots_creates_independent_orders(client, ann):
    r = _place(client, ann, slots=["11:00 AM", "03:00 PM"], items=[COFFEE])
    assert r.status_code == 201
    orders = r.get_json()["orders"]
    assert [o["slot"] for o in orders] == ["11:00 AM", "03:00 PM"]
    assert orders[0]["id"] != orders[1]["id"]
    assert orders[0]["items"][0]["quantity"] == orders[1]["items"][0]["quantity"] == 2

def test_duplicate_slots_are_collapsed(client, ann):
    r = _place(client, ann, slots=["03:00 PM", "03:00 PM"], items=[COFFEE])
    assert len(r.get_json()["orders"]) == 1

@pytest.mark.parametrize("body", [
    {"slot": "11:00 AM", "items": []},
    {"items": [COFFEE]},
    {"slot": "09:00 AM", "items": [COFFEE]},
    {"slot": "11:00 AM", "items": [{"drink": "Juice", "sugar": "With Sugar", "quantity": 1}]},
    {"slot": "11:00 AM", "items": [{"drink": "Tea", "sugar": "Honey", "quantity": 1}]},
    {"slot": "11:00 AM", "items": [{"drink": "Tea", "sugar": "With Sugar", "quantity": 0}]},
    {"slot": "11:00 AM", "slots": ["03:00 PM"], "items": [COFFEE]},
])
def test_place_validation_errors(client, ann, body):
    r = client.post("/api/orders", headers=ann, json=body)
    assert r.status_code == 422
    assert r.get_json()["error"] == "validation_error"

def test_place_requires_login(client):
    r = client.post("/api/orders", json={"slot": "11:00 AM", "items": [COFFEE]})
    assert r.status_code == 401

def test_my_orders_newest_first_and_only_mine(client, ann, bob):
    first = _place(client, ann, slot="11:00 AM", items=[COFFEE]).get_json()
    second = _place(client, ann, slot="03:00 PM", items=[TEA]).get_json()
    _place(client, bob, slot="11:00 AM", items=[TEA])

    r = client.get("/api/orders/my", headers=ann)
    assert r.status_code == 200
    ids = [o["id"] for o in r.get_json()]
    assert ids == [second["id"], first["id"]]

def test_owner_can_edit(client, ann):
    oid = _place(client, ann, slot="11:00 AM", items=[COFFEE]).get_json()["id"]
    r = client.put(f"/api/orders/{oid}", headers=ann,
                   json={"items": [{"drink": "Milk", "sugar": "Without Sugar", "quantity": 3}]})
    assert r.status_code == 200
    js = r.get_json()
    assert len(js["items"]) == 1
    assert js["items"][0]["drink"] == "Milk"
    assert js["slot"] == "11:00 AM"

def test_non_owner_cannot_edit_or_delete(client, ann, bob):
    oid = _place(client, ann, slot="11:00 AM", items=[COFFEE]).get_json()["id"]
    r = client.put(f"/api/orders/{oid}", headers=bob, json={"items": [TEA]})
    assert r.status_code == 403
    assert r.get_json()["error"] == "forbidden"
    r2 = client.delete(f"/api/orders/{oid}", headers=bob)
    assert r2.status_code == 403

def test_admin_can_edit_and_delete_any(client, ann, admin):
    oid = _place(client, ann, slot="11:00 AM", items=[COFFEE]).get_json()["id"]
    r = client.put(f"/api/orders/{oid}", headers=admin, json={"items": [TEA]})
    assert r.status_code == 200
    assert r.get_json()["userName"] == "Ann"

    r2 = client.delete(f"/api/orders/{oid}", headers=admin)
    assert r2.status_code == 200
    assert client.get("/api/orders/my", headers=ann).get_json() == []

def test_edit_missing_order_404(client, ann):
    r = client.put("/api/orders/999", headers=ann, json={"items": [TEA]})
    assert r.status_code == 404
    assert client.delete("/api/orders/999", headers=ann).status_code == 404

def test_edit_with_empty_items_rejected(client, ann):
    oid = _place(client, ann, slot="11:00 AM", items=[COFFEE]).get_json()["id"]
    r = client.put(f"/api/orders/{oid}", headers=ann, json={"items": []})
    assert r.status_code == 422

def test_owner_delete_removes_items(app_ctx, client, ann):
    oid = _place(client, ann, slot="11:00 AM", items=[COFFEE, TEA]).get_json()["id"]
    assert client.delete(f"/api/orders/{oid}", headers=ann).status_code == 200
    with app_ctx.app_context():
        assert db.session.get(Order, oid) is None
        assert OrderItem.query.count() == 0

def test_clear_board_admin_only(client, ann, admin):
    _place(client, ann, slots=["11:00 AM", "03:00 PM"], items=[COFFEE])
    assert client.delete("/api/orders/all", headers=ann).status_code == 403

    r = client.delete("/api/orders/all", headers=admin)
    assert r.status_code == 200
    assert r.get_json() == {"ok": True, "deleted": 2}

    s = client.get("/api/orders/summary", headers=ann).get_json()
    assert s["totalDrinks"] == 0
    assert s["totalWithSugar"] == 0
    assert s["morningSummary"] == {"total": 0, "withSugar": 0}
    assert s["afternoonSummary"] == {"total": 0, "withSugar": 0}
    assert s["table"] == []

def test_all_orders_listing_admin_only(client, ann, bob, admin):
    _place(client, ann, slot="11:00 AM", items=[COFFEE])
    _place(client, bob, slot="03:00 PM", items=[TEA])
    assert client.get("/api/orders", headers=ann).status_code == 403
    r = client.get("/api/orders", headers=admin)
    assert r.status_code == 200
    assert {o["userName"] for o in r.get_json()} == {"Ann", "Bob"}

def test_user_name_is_a_snapshot(client, ann):
    _place(client, ann, slot="11:00 AM", items=[COFFEE])
    client.put("/api/auth/profile", headers=ann, json={"name": "Annie", "email": "ann@example.com"})
    orders = client.get("/api/orders/my", headers=ann).get_json()
    assert orders[0]["userName"] == "Ann"

def test_partial_failure_keeps_earlier_slot(app_ctx, monkeypatch):
    with app_ctx.app_context():
        user = User(name="Cy", email="cy@example.com")
        user.set_pin("1234")
        db.session.add(user)
        db.session.commit()

        session = db.session()
        real_commit = session.commit
        calls = {"n": 0}

        def flaky_commit():
            calls["n"] += 1
            if calls["n"] == 2:
                raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))
            return real_commit()

        monkeypatch.setattr(session, "commit", flaky_commit)
        items = [OrderItemIn(drink="Coffee", sugar="With Sugar", quantity=1)]
        with pytest.raises(OperationalError):
            svc.place_orders(user=user, items=items, slots=[Slot.MORNING, Slot.AFTERNOON])
        monkeypatch.undo()

        orders = Order.query.all()
        assert [o.slot for o in orders] == ["11:00 AM"]

def test_large_quantity_accepted_and_counted(client, ann):
    r = _place(client, ann, slot="11:00 AM",
               items=[{"drink": "Coffee", "sugar": "With Sugar", "quantity": 51}])
    assert r.status_code == 201
    assert r.get_json()["items"][0]["quantity"] == 51

    s = client.get("/api/orders/summary", headers=ann).get_json()
    assert s["totalDrinks"] == 51
    assert s["morningSummary"] == {"total": 51, "withSugar": 51}

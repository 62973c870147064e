"""
Idempotent seed script.
Usage:
  python seed.py --reset         # drop and recreate the db, demo users + demo board
  python seed.py --ensure-admin  # only create accounts for ADMIN_EMAILS (PIN 0000)
  python seed.py                 # soft fill of whatever is missing
"""
import argparse

from flask import current_app

from app import create_app
from extensions import db
from models import User, Order, OrderItem, Drink, Sugar, Slot

DEMO_USERS = [
    ("Alice", "alice@example.com", "1111"),
    ("Bob",   "bob@example.com",   "2222"),
    ("Chen",  "chen@example.com",  "3333"),
]

# (email, slot, [(drink, sugar, qty), ...])
DEMO_ORDERS = [
    ("alice@example.com", Slot.MORNING,   [(Drink.COFFEE, Sugar.WITH_SUGAR, 1), (Drink.TEA, Sugar.WITHOUT_SUGAR, 1)]),
    ("bob@example.com",   Slot.MORNING,   [(Drink.BLACK_COFFEE, Sugar.WITHOUT_SUGAR, 2)]),
    ("chen@example.com",  Slot.AFTERNOON, [(Drink.MILK, Sugar.WITH_SUGAR, 1)]),
]

def get_or_create_user(name: str, email: str, pin: str):
    email = email.lower()
    user = User.query.filter_by(email=email).first()
    if user:
        return user, False
    user = User(name=name, email=email)
    user.set_pin(pin)
    db.session.add(user)
    db.session.flush()
    return user, True

def seed_users():
    users = {}
    for name, email, pin in DEMO_USERS:
        u, _ = get_or_create_user(name, email, pin)
        users[u.email] = u
    db.session.commit()
    return users

def seed_orders(users):
    # only on an empty board, so a second run does not double the counts
    if db.session.query(Order.id).first():
        return 0
    created = 0
    for email, slot, lines in DEMO_ORDERS:
        u = users.get(email)
        if not u:
            continue
        order = Order(user_id=u.id, user_name=u.name, slot=slot.value, items=[
            OrderItem(position=i, drink=d.value, sugar=s.value, quantity=q)
            for i, (d, s, q) in enumerate(lines)
        ])
        db.session.add(order)
        created += 1
    db.session.commit()
    return created

def ensure_admins():
    created = 0
    for email in current_app.config.get("ADMIN_EMAILS", []):
        _, new = get_or_create_user("Admin", email, "0000")
        created += int(new)
    db.session.commit()
    return created

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="drop + create + full demo seed")
    parser.add_argument("--ensure-admin", action="store_true", help="create only the allow-listed admins")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.reset:
            db.drop_all()
            db.create_all()
            ensure_admins()
            n = seed_orders(seed_users())
            print(f"[seed] reset+seed complete, {n} demo orders")
            return

        if args.ensure_admin:
            db.create_all()
            created = ensure_admins()
            print(f"[seed] {created} admin account(s) created." if created else "[seed] admins already exist.")
            return

        db.create_all()
        ensure_admins()
        n = seed_orders(seed_users())
        print(f"[seed] soft seed complete, {n} demo orders")

if __name__ == "__main__":
    main()

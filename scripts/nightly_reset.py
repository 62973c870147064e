# scripts/nightly_reset.py
# Run from cron at midnight:  0 0 * * *  cd /srv/brewhub && python -m scripts.nightly_reset
from app import create_app
from blueprints.orders.services import clear_all_orders
from blueprints.broadcasts.services import purge_expired

def run_reset() -> dict:
    """Clear the board for the new day and drop expired broadcasts."""
    orders = clear_all_orders()
    broadcasts = purge_expired()
    return {"orders": orders, "broadcasts": broadcasts}

if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        res = run_reset()
        print(f"Midnight reset: {res['orders']} orders, {res['broadcasts']} expired broadcasts removed")

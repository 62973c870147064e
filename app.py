from __future__ import annotations
import os
from flask import Flask
from config import config_map
from extensions import db, migrate, login_manager
from sqlalchemy import inspect

def _seed_from_config(app):
    if not app.config.get("SEED_TEST_DATA"):
        return
    with app.app_context():
        # the users table may not exist yet (before `flask db upgrade`)
        if not inspect(db.engine).has_table("users"):
            return

        from models import User  # local import to avoid cycles
        created = 0
        for u in app.config.get("DEFAULT_USERS", []):
            email = u["email"].strip().lower()
            if User.query.filter_by(email=email).first():
                continue
            user = User(name=u["name"], email=email)
            user.set_pin(u["pin"])
            db.session.add(user)
            created += 1
        if created:
            db.session.commit()
            app.logger.info("seeded default users", extra={"event": "seed_users"})

def register_blueprints(app: Flask) -> None:
    from blueprints.core import bp as core_bp
    from blueprints.auth.routes import api_bp as auth_api_bp
    from blueprints.orders.routes import api_bp as orders_api_bp
    from blueprints.reports.routes import api_bp as reports_api_bp
    from blueprints.broadcasts.routes import api_bp as broadcasts_api_bp
    from blueprints.admin.routes import api_bp as admin_api_bp

    # core has no prefix -> '/health' at the root
    app.register_blueprint(core_bp)
    app.register_blueprint(reports_api_bp, url_prefix="/api")
    app.register_blueprint(auth_api_bp, url_prefix="/api")
    app.register_blueprint(orders_api_bp, url_prefix="/api")
    app.register_blueprint(broadcasts_api_bp, url_prefix="/api")
    app.register_blueprint(admin_api_bp, url_prefix="/api")

def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # pytest always sets PYTEST_CURRENT_TEST: keep every test on its own in-memory db
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    register_blueprints(app)
    _seed_from_config(app)
    return app

from __future__ import annotations
import os
from pathlib import Path

def _csv_env(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    return [x.strip().lower() for x in raw.split(",") if x.strip()]

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent
    # SQLite file in project directory
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'brewhub.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # admin membership is a static allow-list
    ADMIN_EMAILS = _csv_env("ADMIN_EMAILS", "admin@example.com")

    TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", str(60 * 60 * 24 * 30)))  # 30 days
    BROADCAST_TTL_SECONDS = int(os.getenv("BROADCAST_TTL_SECONDS", "3600"))

    AUTH_RL_MAX = int(os.getenv("AUTH_RL_MAX", "5"))
    AUTH_RL_WINDOW = int(os.getenv("AUTH_RL_WINDOW", "300"))

    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "25"))
    MAIL_USE_TLS = os.getenv("MAIL_USE_TLS", "0") == "1"
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "brewhub@example.com")
    MAIL_SUPPRESS_SEND = False

    SEED_TEST_DATA = False
    DEFAULT_USERS: list[dict] = []

class DevConfig(BaseConfig):
    DEBUG = True
    SEED_TEST_DATA = True
    MAIL_SUPPRESS_SEND = True
    DEFAULT_USERS = [
        {"name": "Office Admin", "email": "admin@example.com", "pin": "0000"},
        {"name": "Demo User",    "email": "demo@example.com",  "pin": "1234"},
    ]

class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    ADMIN_EMAILS = ["admin@example.com"]
    MAIL_SUPPRESS_SEND = True
    AUTH_RL_MAX = 5
    AUTH_RL_WINDOW = 60

class ProdConfig(BaseConfig):
    DEBUG = False
    SEED_TEST_DATA = False
    DEFAULT_USERS = []

config_map = {
    "dev": DevConfig,
    "test": TestConfig,
    "prod": ProdConfig,
    "default": DevConfig,
}

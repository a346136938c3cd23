import os
from datetime import timedelta


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "springlib-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///springlib.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # tables are created on startup unless migrations own the schema
    AUTO_CREATE_TABLES = _flag("AUTO_CREATE_TABLES", "1")

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "springlib-jwt-secret-change-me-in-production")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_HOURS", "24")))

    # loan policy
    LOAN_DEFAULT_DAYS = int(os.getenv("LOAN_DEFAULT_DAYS", "7"))
    MEMBERS_MAY_RETURN = _flag("MEMBERS_MAY_RETURN", "0")

    # background sweep of pending requests left behind by interrupted cascades
    SCHEDULER_ENABLED = _flag("SCHEDULER_ENABLED", "1")
    PENDING_SWEEP_MINUTES = int(os.getenv("PENDING_SWEEP_MINUTES", "10"))

    # `flask seed`
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@springlib.local")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AUTO_CREATE_TABLES = True
    JWT_SECRET_KEY = "springlib-test-jwt-secret-with-enough-bytes"
    SCHEDULER_ENABLED = False
    MEMBERS_MAY_RETURN = False

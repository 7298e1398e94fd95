import os
from decimal import Decimal


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///library.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "1") == "1"

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-super-secret-key-change-me-in-production")

    SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "library_session")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "0") == "1"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Borrowal rules
    LOAN_PERIOD_DAYS = int(os.getenv("LOAN_PERIOD_DAYS", "14"))
    FINE_PER_DAY = Decimal(os.getenv("FINE_PER_DAY", "1"))
    RECENT_BORROWALS_LIMIT = int(os.getenv("RECENT_BORROWALS_LIMIT", "5"))

    # Overdue sweep (status label refresh + reminder mails)
    OVERDUE_SWEEP_ENABLED = os.getenv("OVERDUE_SWEEP_ENABLED", "0") == "1"
    OVERDUE_SWEEP_MINUTES = int(os.getenv("OVERDUE_SWEEP_MINUTES", "10"))

    MAIL_ENABLED = os.getenv("MAIL_ENABLED", "0") == "1"
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = True
    MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@library.local")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AUTO_CREATE_TABLES = False
    OVERDUE_SWEEP_ENABLED = False
    MAIL_ENABLED = True
    MAIL_SUPPRESS_SEND = True

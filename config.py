import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as thescent.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "thescent.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Where accounts and sessions live: "database" or "memory"
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "database")

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "thescent_session"

    # 1 week session lifetime
    SESSION_LIFETIME_SECONDS = 7 * 24 * 60 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("FLASK_ENV") == "production"

    # Brute-force protection
    MAX_LOGIN_ATTEMPTS = 5
    LOCKOUT_MINUTES = 30

    # Password hashing: "scrypt" (default) or "bcrypt"
    PASSWORD_HASH_SCHEME = os.getenv("PASSWORD_HASH_SCHEME", "scrypt")

    # Password policy
    PASSWORD_MIN_LEN = 8
    PASSWORD_MAX_LEN = 128
    PASSWORD_REQUIRE_UPPER = True
    PASSWORD_REQUIRE_LOWER = True
    PASSWORD_REQUIRE_DIGIT = True
    PASSWORD_REQUIRE_SYMBOL = False

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    STORAGE_BACKEND = "memory"
    SESSION_COOKIE_SECURE = False

"""Application configuration helpers."""

import os

from dotenv import load_dotenv

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_DOTENV_PATH = os.path.join(_BASE_DIR, ".env")

if os.path.exists(_DOTENV_PATH):
    load_dotenv(_DOTENV_PATH)


DEFAULT_DB_NAME = "university-management"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8081",
)


class ConfigError(RuntimeError):
    """Raised when configuration values are missing or invalid."""


def get_mongo_uri():
    """Return the MongoDB connection string from the environment."""

    uri = os.getenv("MONGODB_URI")
    if not uri:
        raise ConfigError("MONGODB_URI is not set. Define it in backend/.env.")
    return uri


def get_db_name():
    """Return the database name from MONGODB_DB, the URI path, or the default."""

    db_name = os.getenv("MONGODB_DB")
    if db_name:
        return db_name

    uri = os.getenv("MONGODB_URI", "")
    main = uri.split("?", 1)[0].rstrip("/")
    if "://" in main:
        main = main.split("://", 1)[1]

    if "/" in main:
        candidate = main.split("/", 1)[1]
        if candidate:
            return candidate

    return DEFAULT_DB_NAME


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer.") from None
    if value <= 0:
        raise ConfigError(f"{name} must be a positive integer.")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number.") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative.")
    return value


def get_app_env():
    return os.getenv("APP_ENV", "production").strip().lower() or "production"


def is_development():
    return get_app_env() == "development"


def get_port():
    return _int_env("PORT", 5000)


def get_log_level():
    return os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def get_cors_origins():
    """Return the origins allowed to call the API from a browser."""

    raw = os.getenv("CORS_ORIGINS")
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_connect_attempts():
    return _int_env("MONGO_CONNECT_ATTEMPTS", 5)


def get_retry_delay():
    return _float_env("MONGO_RETRY_DELAY", 1.0)


def get_max_pool_size():
    return _int_env("MONGO_MAX_POOL_SIZE", 50)


__all__ = [
    "ConfigError",
    "DEFAULT_DB_NAME",
    "get_mongo_uri",
    "get_db_name",
    "get_app_env",
    "is_development",
    "get_port",
    "get_log_level",
    "get_cors_origins",
    "get_connect_attempts",
    "get_retry_delay",
    "get_max_pool_size",
]

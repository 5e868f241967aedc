# app/config.py

import os

from dotenv import load_dotenv

load_dotenv()


def _normalize_database_url(url: str) -> str:
    # SQLAlchemy no longer accepts the postgres:// scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


def _required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(f"{name} is not set (put it in the environment or .env)")
    return value


DATABASE_URL: str = _normalize_database_url(
    os.getenv("DATABASE_URL", "sqlite:///./expenses.db")
)

# Session signing key, required
SECRET_KEY: str = _required("SECRET_KEY")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

# Where unauthenticated requests get sent
LOGIN_URL: str = os.getenv("LOGIN_URL", "/login")

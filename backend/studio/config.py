# backend/studio/config.py
from __future__ import annotations
import os


def _split_csv(value: str) -> set[str]:
    return {item.strip() for item in value.split(",") if item.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/studio.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///studio.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("STUDIO_LOG_LEVEL", "INFO")

    CORS_ORIGINS = _split_csv(os.environ.get(
        "STUDIO_CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
    ))

    # Role names as stored in the roles table
    THERAPIST_ROLE = os.environ.get("STUDIO_THERAPIST_ROLE", "therapist")
    SELLER_ROLE = os.environ.get("STUDIO_SELLER_ROLE", "seller")
    ADMIN_ROLE = os.environ.get("STUDIO_ADMIN_ROLE", "admin")

    SESSION_TTL_HOURS = int(os.environ.get("STUDIO_SESSION_TTL_HOURS", "24"))

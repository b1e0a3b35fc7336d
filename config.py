# config.py
import os
from datetime import timedelta


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "mysql+pymysql://root:@localhost/movewell"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT config
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)

    # Habits are appended on every submission unless this is switched on
    DEDUPE_HABITS = _env_flag("DEDUPE_HABITS", False)

    # Optimistic retries for the per-user streak record
    STREAK_UPDATE_ATTEMPTS = int(os.environ.get("STREAK_UPDATE_ATTEMPTS", "3"))

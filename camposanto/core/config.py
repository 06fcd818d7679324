from __future__ import annotations

import os


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///camposanto.db",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APP_ENV = os.getenv("APP_ENV", "production")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PUBLIC_SEARCH_LIMIT = int(os.getenv("PUBLIC_SEARCH_LIMIT", "50"))
    # When set, only APPROVED requests can be assigned a plot.
    BURIAL_ASSIGN_REQUIRES_APPROVAL = _env_flag("BURIAL_ASSIGN_REQUIRES_APPROVAL")

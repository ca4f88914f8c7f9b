from __future__ import annotations

import logging
import os
from typing import List

from dotenv import load_dotenv

from backend.app.clarity.benchmarks import BusinessProfile

load_dotenv()

logger = logging.getLogger(__name__)

LOCAL_DEV_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")
MAX_FORECAST_HORIZON = 24


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def forecast_horizon() -> int:
    horizon = _int_env("FORECAST_HORIZON", 3)
    if not 0 <= horizon <= MAX_FORECAST_HORIZON:
        raise RuntimeError(f"FORECAST_HORIZON must be between 0 and {MAX_FORECAST_HORIZON}.")
    return horizon


def default_business_profile() -> BusinessProfile:
    return BusinessProfile(
        type=os.getenv("DEFAULT_BUSINESS_TYPE") or "SaaS",
        industry=os.getenv("DEFAULT_INDUSTRY") or "Technology",
    )


def log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").upper()


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS")
    if raw is None:
        origins = list(LOCAL_DEV_ORIGINS)
    else:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        raise RuntimeError("CORS_ALLOW_ORIGINS must not be empty.")
    if not any(origin in origins for origin in LOCAL_DEV_ORIGINS):
        logger.warning("CORS allowlist does not include local dev origins: %s", origins)
    return origins

"""Application configuration objects and helpers."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer; got {value!r}") from exc


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number; got {value!r}") from exc


class Settings:
    """Settings shared by the CLI and the web API.

    The engine itself never reads these; they are passed in as arguments.
    """

    APP_NAME = "offset-calc"

    def __init__(self) -> None:
        self.HORIZON_DAYS = _env_int("OFFSET_CALC_HORIZON_DAYS", 11_020)
        self.MAX_MONTHS = _env_int("OFFSET_CALC_MAX_MONTHS", 360)
        self.GRACE_MONTHS = _env_int("OFFSET_CALC_GRACE_MONTHS", 12)
        self.TERM_MONTHS = _env_int("OFFSET_CALC_TERM_MONTHS", 360)
        self.RATE_TTL_SECONDS = _env_int("OFFSET_CALC_RATE_TTL_SECONDS", 60 * 60)
        self.FALLBACK_RATE = _env_float("OFFSET_CALC_FALLBACK_RATE", 0.065)
        self.LOG_LEVEL = os.getenv("OFFSET_CALC_LOG_LEVEL", "INFO").upper()
        self.LOG_JSON = _env_bool("OFFSET_CALC_LOG_JSON", default=False)
        self.DEV_MODE = _env_bool("OFFSET_CALC_DEV_MODE", default=True)
        self.SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret-key")
        if self.HORIZON_DAYS <= 0 or self.MAX_MONTHS <= 0 or self.TERM_MONTHS <= 0:
            raise ValueError("Horizon, month limit and term must be positive.")
        if self.GRACE_MONTHS < 1:
            raise ValueError("OFFSET_CALC_GRACE_MONTHS must be at least 1.")
        if not 0 < self.FALLBACK_RATE < 1:
            raise ValueError("OFFSET_CALC_FALLBACK_RATE must be a fraction between 0 and 1.")
        if not self.DEV_MODE and self.SECRET_KEY == "dev-secret-key":
            raise ValueError("FLASK_SECRET_KEY must be set in non-dev mode.")

    def simulation_options(self) -> dict:
        """Keyword arguments for ``comparison.simulate``."""
        return {
            "horizon_days": self.HORIZON_DAYS,
            "max_months": self.MAX_MONTHS,
            "grace_months": self.GRACE_MONTHS,
        }

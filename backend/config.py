# backend/config.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv

# Load exactly backend/.env (do NOT call load_dotenv() without a path)
ENV_FILE = Path(__file__).with_name(".env")
load_dotenv(ENV_FILE, override=False)

PLACEHOLDER_TOKEN = "INSERT_YOUR_MAPBOX_TOKEN_HERE"


@dataclass(frozen=True)
class CacheConfig:
    ttl_seconds: int
    enabled: bool = True


def _env_flag(name: str, default: bool = True) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() != "false"


class Settings:
    """Runtime settings read from the environment (and backend/.env)."""

    def __init__(self) -> None:
        self.APP_ENV: str = os.getenv("APP_ENV", "development")
        self.MAPBOX_ACCESS_TOKEN: str = (
            os.getenv("MAPBOX_ACCESS_TOKEN")
            or os.getenv("MAPBOX_TOKEN")
            or PLACEHOLDER_TOKEN
        )
        self.MAPBOX_BASE_URL: str = os.getenv(
            "MAPBOX_BASE_URL", "https://api.mapbox.com"
        ).rstrip("/")
        self.HTTP_TIMEOUT_S: float = float(os.getenv("HTTP_TIMEOUT_S", "15.0"))
        self.CORS_ALLOW_ORIGINS: list[str] = os.getenv(
            "CORS_ALLOW_ORIGINS", "http://localhost:3000"
        ).split(",")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        cache_enabled = _env_flag("ENABLE_CACHE", True)
        self.GEOCODING_CACHE = CacheConfig(
            ttl_seconds=int(os.getenv("CACHE_GEOCODING_TTL", "86400")),  # 24 hours
            enabled=cache_enabled,
        )
        self.DIRECTIONS_CACHE = CacheConfig(
            ttl_seconds=int(os.getenv("CACHE_DIRECTIONS_TTL", "3600")),  # 1 hour
            enabled=cache_enabled,
        )

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def has_mapbox_token(self) -> bool:
        return bool(self.MAPBOX_ACCESS_TOKEN) and self.MAPBOX_ACCESS_TOKEN != PLACEHOLDER_TOKEN

    def validate(self) -> None:
        if self.is_production and not self.has_mapbox_token:
            raise RuntimeError("Mapbox access token is required in production")


def get_settings() -> Settings:
    # Re-read every call so tests can monkeypatch the environment
    return Settings()

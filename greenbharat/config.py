"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 4000
    cors_origin: str = "*"
    log_level: str = "INFO"

    # Storage: empty -> in-memory store for the lifetime of the process,
    # e.g. "sqlite+aiosqlite:///./greenbharat.db" for a durable one
    database_url: str = ""

    # Pricing
    nominal_distance_km: float = 5.0  # used when a trip has no coordinates

    # Rate limiting
    rate_limit: str = "100/minute"
    rate_limit_enabled: bool = True

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

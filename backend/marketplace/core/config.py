"""Marketplace settings, read from the environment and an optional .env file."""

from typing import Dict, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Decor Marketplace API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Identity tokens
    # WHY: Every identity claim comes from a verified bearer token, never
    # from a request body.
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_EXPIRATION_MINUTES: int = 1440  # 24 hours

    # Database
    DATABASE_URL: str

    # URLs
    FRONTEND_URL: str = "http://localhost:5173"

    # Stripe
    STRIPE_SECRET_KEY: str
    STRIPE_CURRENCY: str = "usd"
    STRIPE_TIMEOUT_SECONDS: int = 20
    STRIPE_MAX_NETWORK_RETRIES: int = 2

    # Pricing
    # WHY: Coupon code -> fractional discount. Every rate must be in (0, 1].
    COUPON_RATES: Dict[str, float] = {
        "SAVE10": 0.10,
        "SAVE20": 0.20,
        "DECOR25": 0.25,
    }

    # Pagination
    DEFAULT_PAGE_SIZE: int = 12
    MAX_PAGE_SIZE: int = 100

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    @property
    def async_database_url(self) -> str:
        """DATABASE_URL with the asyncpg driver selected for postgres URLs."""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


settings = Settings()

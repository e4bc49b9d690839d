# storefront/core/config.py

from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    SECRET_KEY: str
    DATABASE_URL: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Where the hosted payment page sends the buyer back to
    FRONTEND_URL: str = "http://localhost:3000"

    # Payment provider: "stripe" for the real API, "mock" for local development
    PAYMENT_PROVIDER: str = "stripe"
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None
    STRIPE_API_BASE: str = "https://api.stripe.com"
    PAYMENT_CURRENCY: str = "rub"
    PAYMENT_PROVIDER_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_PROVIDER_MAX_RETRIES: int = 2
    SHIPPING_COUNTRIES: str = "RU,KZ"

    # Catalog cache (disabled when REDIS_URL is not set)
    REDIS_URL: Optional[str] = None
    CATALOG_CACHE_TTL_SECONDS: int = 300

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

settings = Settings()

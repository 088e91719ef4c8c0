"""
Application configuration and settings management
"""
import os
from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "CarRental"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./carrental.db"
    ).replace("postgres://", "postgresql://", 1)

    # Logging
    LOG_FILE: Optional[str] = "logs/app.log"

    # PayPal Payment Gateway
    PAYPAL_CLIENT_ID: str = ""
    PAYPAL_SECRET: str = ""
    PAYPAL_API_URL: str = "https://api-m.sandbox.paypal.com"  # api-m.paypal.com in production
    PAYPAL_BRAND_NAME: str = "Car Rental Website"
    PAYPAL_TIMEOUT: float = 30.0
    PAYPAL_CACHE_ACCESS_TOKEN: bool = False

    # Analytics
    ANALYTICS_SOURCE: str = "sample"  # "sample" or "database"

    # Site URLs
    BASE_URL: str = "https://carrentalwebsite.com"
    FRONTEND_URL: str = ""  # Falls back to BASE_URL

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"
    }

    @property
    def frontend_url(self) -> str:
        """Front-end base URL used for browser redirects"""
        return (self.FRONTEND_URL or self.BASE_URL).rstrip("/")

    @property
    def base_url(self) -> str:
        return self.BASE_URL.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance with placeholder filtering"""
    s = Settings()
    # Filter out common placeholders from environment
    placeholders = ["XXXX", "your-", "replace-"]

    def is_placeholder(val: Optional[str]) -> bool:
        if not val: return True
        return any(p in val for p in placeholders) or any(p in val.lower() for p in placeholders)

    if is_placeholder(s.PAYPAL_CLIENT_ID):
        s.PAYPAL_CLIENT_ID = ""
    if is_placeholder(s.PAYPAL_SECRET):
        s.PAYPAL_SECRET = ""

    return s


# Global settings instance
settings = get_settings()

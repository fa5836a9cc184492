"""
Application configuration management.

Uses pydantic-settings for type-safe environment variable parsing.
All configuration is centralized here to support dependency injection
and avoid scattering os.getenv() calls throughout the codebase.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation and type coercion.

    Values are loaded from environment variables or .env file.
    All fields have sensible defaults for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Backend Selection
    # Options: "mongodb", "memory"
    storage_backend: Literal["mongodb", "memory"] = "mongodb"

    # MongoDB Configuration (default backend)
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "storefront"

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7

    # Payment gateway
    # Options: "mock" (sandbox, no network), "braintree"
    payment_backend: Literal["mock", "braintree"] = "mock"
    braintree_environment: Literal["sandbox", "production"] = "sandbox"
    braintree_merchant_id: str = ""
    braintree_public_key: str = ""
    braintree_private_key: str = ""

    # Catalog
    max_photo_bytes: int = 1_000_000
    products_per_page: int = 6
    latest_products_limit: int = 12
    related_products_limit: int = 3

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    debug: bool = True
    cors_origins: list[str] = ["*"]

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings singleton.

    Use this function to get settings instance throughout the application.
    The @lru_cache ensures we only parse environment once.
    """
    return Settings()


# Convenience export for direct import
settings = get_settings()

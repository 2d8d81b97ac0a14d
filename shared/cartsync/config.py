"""Storefront cart configuration"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from pricing.calculator import STANDARD_SHIPPING_COST


class Settings(BaseSettings):
    """Cart settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="CART_",
        env_file="config/.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Hosted backend
    backend_base_url: str = "http://localhost:8001"
    http_timeout: float = 10.0

    # Pricing
    standard_shipping_cost: float = STANDARD_SHIPPING_COST
    strict_rules: bool = False

    # Device storage
    local_store_dir: Optional[str] = None
    session_keys: list[str] = ["cart", "wishlist", "recentlyViewed", "session"]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

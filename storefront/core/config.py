"""Storefront Configuration"""

from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_API_BASE_URL = "https://nbbackend-production.up.railway.app/api"


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    # Remote product / order API
    api_base_url: str = DEFAULT_API_BASE_URL
    api_timeout: float = 30.0

    # Catalog
    catalog_page_size: int = 12

    # Sessions
    session_max_age_hours: int = 24

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

"""
Application configuration using pydantic-settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from rentdesk.journey.thresholds import InsightThresholds


class Settings(BaseSettings):
    """Application settings loaded from environment."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
    
    # Application
    app_name: str = "rentdesk"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    
    # API Server
    host: str = "0.0.0.0"
    port: int = 8000
    
    # Postgres (record stores, read-only)
    database_url: str = ""
    db_pool_size: int = 10
    db_max_overflow: int = 10
    
    # Shared key for the journey API
    api_key: str = ""
    
    # Tenant journey
    journey_max_events_limit: int = 100
    journey_timeout_seconds: float = 15.0
    journey_visitor_limit: int = 50
    journey_meter_reading_limit: int = 20
    journey_pre_tenant_scan_limit: int = 100
    
    # Insight Engine weights (INSIGHT_THRESHOLDS__<FIELD>=...)
    insight_thresholds: InsightThresholds = InsightThresholds()
    
    @property
    def is_development(self) -> bool:
        return self.app_env == "development"
    
    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

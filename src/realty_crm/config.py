"""Configuration and environment loading for the Realty CRM core."""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    supabase_url: str
    supabase_key: str

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    login_route: str = "/login"
    currency_symbol: str = "₹"

    # Tenant calendar day used for "today's appointments"
    tenant_timezone: str = "Asia/Kolkata"

    # Dashboard aggregation
    query_timeout_seconds: float = 10.0
    aggregation_deadline_seconds: float = 15.0

    @model_validator(mode="after")
    def _query_timeout_within_deadline(self) -> "Settings":
        # One hung query must time out before the whole join does
        if self.query_timeout_seconds >= self.aggregation_deadline_seconds:
            raise ValueError(
                "query_timeout_seconds must be less than aggregation_deadline_seconds"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

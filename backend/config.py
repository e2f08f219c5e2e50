"""
Application configuration from environment variables.
"""
from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings

# .env is in the project root (parent of backend/)
ENV_FILE = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    # Booking API
    api_base_url: str = "http://localhost:3000/api"
    tenant_domain: str = "localhost"  # Default X-Tenant-Domain when the caller sends none
    request_timeout_seconds: float = 15.0

    # Tenant domains
    main_domain: str = "agenditapp.com"
    signup_subdomain: str = "app"

    # Session
    token_refresh_threshold_seconds: int = 300  # Refresh bearer token 5 min before expiry

    # Payment activation polling
    payment_poll_interval_seconds: float = 4.0
    payment_poll_max_attempts: int = 15  # 60 seconds at the default interval
    payment_clock_skew_seconds: int = 30

    # Billing
    upgradeable_plan_slug: str = "plan-esencial"
    default_currency: str = "COP"

    # Analytics
    analytics_history_days: int = 180  # Lookback window for inactive-client insights

    # App settings
    debug: bool = True
    log_level: str = "INFO"

    class Config:
        env_file = str(ENV_FILE)
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

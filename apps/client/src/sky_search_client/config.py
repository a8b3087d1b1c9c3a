"""Client configuration via environment variables."""

from datetime import date
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SKY_SEARCH_", env_file=".env", extra="ignore"
    )

    # Sky Scrapper on RapidAPI
    rapidapi_key: str = ""
    rapidapi_host: str = "sky-scrapper.p.rapidapi.com"
    base_url: str = "https://sky-scrapper.p.rapidapi.com/api"

    # Timeout (seconds); None leaves requests unbounded
    request_timeout: float | None = None

    # Retries on 429 / network errors (0 = off)
    max_retries: int = 0
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0

    # Request defaults
    default_locale: str = "en-US"
    default_market: str = "en-US"
    default_country_code: str = "US"
    default_currency: str = "USD"
    fallback_date: date = date(2025, 12, 25)

    # Airport typeahead
    debounce_seconds: float = 0.5
    min_query_length: int = 2

    # Local mock auth
    credentials_path: Path = Path.home() / ".sky-search" / "credentials.json"
    auth_secret: str = "sky-search-local-development-signing-key"
    auth_algorithm: str = "HS256"

    log_level: str = "INFO"


settings = ClientSettings()

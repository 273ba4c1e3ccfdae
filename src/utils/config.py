import os
from pathlib import Path
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv


dotenv_path = Path(__file__).resolve().parents[2] / '.env'
load_dotenv(dotenv_path)


class Settings(BaseSettings):
    """Global configurations."""

    # Provider credentials
    NEWS_API_KEY: str = Field("", description="NewsAPI.org key")
    GUARDIAN_API_KEY: str = Field("", description="The Guardian Open Platform key")
    NYT_API_KEY: str = Field("", description="New York Times developer key")

    # Provider endpoints
    NEWS_API_URL: str = "https://newsapi.org/v2"
    GUARDIAN_API_URL: str = "https://content.guardianapis.com"
    NYT_API_URL: str = "https://api.nytimes.com/svc"

    NEWS_API_COUNTRY: str = "us"
    HEADLINE_PAGE_SIZE: int = 20
    SEARCH_PAGE_SIZE: int = 30
    GUARDIAN_SEARCH_LOOKBACK_DAYS: int = 30
    GUARDIAN_LATEST_LOOKBACK_DAYS: int = 1
    NYT_POPULAR_PERIOD_DAYS: int = 7  # 1, 7 or 30

    # Timeouts (seconds)
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    FANOUT_DEADLINE_SECONDS: float = 45.0

    # Article store
    DATABASE_URL: str = Field("sqlite:///./articles.db", description="SQLAlchemy database URL")
    SQLALCHEMY_ECHO: bool = False

    # Pagination
    DEFAULT_PER_PAGE: int = 10
    MAX_PER_PAGE: int = 100

    # Scheduled refresh
    FETCH_INTERVAL_MINUTES: int = int(os.getenv("FETCH_INTERVAL_MINUTES", 60))

    ENV_STATE: str = Field('dev')

    # Logging
    LOG_LEVEL: str = Field('INFO')
    LOG_FORMAT: str = Field('text', description="text or json")
    LOG_DIR: str = 'logs'
    LOG_RETENTION_DAYS: int = 15
    LOG_CONSOLE: bool = True
    LOG_FILE_ENABLED: bool = True


# Avoid having to re-read the .env file and create the Settings object every time you access it
@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

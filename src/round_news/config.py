from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    news_api_key: str | None = None
    news_api_base_url: str = "https://newsapi.org/v2/"
    request_timeout: float = 10.0

    page_size: int = 20
    initial_query: str = "Android"
    categories: List[str] = [
        "business",
        "entertainment",
        "health",
        "science",
        "sports",
        "technology",
    ]
    load_more_threshold: int = 5
    max_sessions: int = 100

    round_news_api_base_url: str = "http://localhost:8000"

    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()

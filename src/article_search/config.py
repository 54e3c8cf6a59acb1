"""Configuration helpers for the article search app."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SEARCH_PATH = "/svc/search/v2/articlesearch.json"


def default_data_dir() -> Path:
    # __file__ -> src/article_search/config.py; repo root is three levels up
    return Path(__file__).resolve().parents[2] / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    search_api_key: str | None = Field(None, alias="SEARCH_API_KEY")
    search_host: str = Field(
        "api.nytimes.com",
        alias="SEARCH_HOST",
        description="Host serving the article search endpoint.",
    )
    search_timeout: float = Field(
        20.0, alias="SEARCH_TIMEOUT", description="HTTP timeout in seconds."
    )
    data_dir: Path | None = Field(
        None,
        alias="ARTICLE_DATA_DIR",
        description="Directory for the article cache and preferences; defaults to data/.",
    )
    connectivity_interval: float = Field(
        5.0,
        alias="CONNECTIVITY_INTERVAL",
        description="Seconds between connectivity probes in watch/serve mode.",
    )
    connectivity_timeout: float = Field(
        3.0,
        alias="CONNECTIVITY_TIMEOUT",
        description="Seconds before a connectivity probe counts as offline.",
    )

    @property
    def search_url(self) -> str:
        """Endpoint URL without the api-key query parameter."""
        return f"https://{self.search_host}{SEARCH_PATH}"

    def resolved_data_dir(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser().resolve()
        return default_data_dir()


def get_settings() -> Settings:
    """Return a settings instance read from the current environment."""
    return Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyUrl


class Settings(BaseSettings):
    BASE_URL: AnyUrl | None = None         # e.g. https://homes.example.com
    RESULTS_PATH: str = "/search"          # results page of the frontend

    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"                # DEBUG traces normalizer fallbacks

    PUBLISHED_STATUSES: list[str] = ["Approved", "Published", "Active"]
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    NEWLY_LISTED_DAYS: int = 7

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

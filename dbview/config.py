"""Runtime settings, read from DBVIEW_* environment variables or a .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="DBVIEW_", env_file=".env", extra="ignore"
    )

    # Backend
    api_url: str = "http://localhost:8080"

    # Query console
    default_query: str = "SELECT * FROM users LIMIT 10;"

    debug: bool = False


settings = Settings()

"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Social Events API"
    debug: bool = False
    log_dir: Path = Path.home() / ".logs" / "social_events"

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 3000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./social_events.db"

    # Identity provider: OAuth client ID that ID tokens must be issued for
    google_client_id: str = ""


settings = Settings()

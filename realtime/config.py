from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Priority: environment variables > .env file
        env_prefix="HUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=True,
    )

    # Liveness probe period; a dead peer is reaped within two periods.
    HEARTBEAT_INTERVAL_SECONDS: float = 30.0
    DEFAULT_NAME_PREFIX: str = "User-"
    PAGES_DIR: Path = PROJECT_DIR / "pages"
    # Behind a proxy the socket peer is the proxy; use the first X-Forwarded-For hop instead.
    TRUST_FORWARDED_FOR: bool = True


config = Settings()

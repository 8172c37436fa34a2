"""Environment-driven configuration for the NexaCRM backend."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration.

    Reads from the process environment and an optional local .env file.
    Provider keys are optional: without FIRECRAWL_API_KEY the social features
    fall back to generated data, without GOOGLE_MAPS_API_KEY the places
    search is unavailable.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="NexaCRM", alias="APP_NAME")
    api_version: str = "1.0.0"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(default="sqlite:///./nexacrm.db", alias="DATABASE_URL")

    secret_key: str = Field(default="nexacrm-secret", alias="JWT_SECRET")
    access_token_expire_minutes: int = Field(default=7 * 24 * 60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    owner_email: str = Field(default="owner@example.com", alias="OWNER_EMAIL")

    firecrawl_api_key: Optional[str] = Field(default=None, alias="FIRECRAWL_API_KEY")
    firecrawl_base_url: str = Field(default="https://api.firecrawl.dev/v1", alias="FIRECRAWL_BASE_URL")
    google_maps_api_key: Optional[str] = Field(default=None, alias="GOOGLE_MAPS_API_KEY")
    google_maps_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/place", alias="GOOGLE_MAPS_BASE_URL"
    )

    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")
    cors_origins: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")

    @property
    def SECRET_KEY(self) -> str:
        return self.secret_key

    @property
    def ACCESS_TOKEN_EXPIRE_MINUTES(self) -> int:
        return self.access_token_expire_minutes

    @property
    def normalized_owner_email(self) -> str:
        return self.owner_email.strip().lower()

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


_settings_instance = None


def get_settings() -> Settings:
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

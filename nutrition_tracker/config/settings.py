from typing import ClassVar

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    REQUIRED_ENV_VARS: ClassVar[dict[str, str]] = {
        "NOTION_API_KEY": "notion_api_key",
        "NOTION_DATABASE_ID": "notion_database_id",
        "OPENAI_API_KEY": "openai_api_key",
    }

    app_env: str = "dev"
    app_name: str = "nutrition-tracker"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    notion_api_key: str = ""
    notion_database_id: str = ""
    notion_timeout_seconds: int = 60

    analysis_provider: str = "openai"
    openai_api_key: str = ""
    openai_model: str = "gpt-5"
    openai_base_url: str = ""
    openai_timeout_seconds: int = 120
    openai_temperature: float = 0.2

    image_download_timeout_seconds: int = 30
    image_max_dimension: int = 1024
    image_jpeg_quality: int = 85

    meal_time_fallback_to_now: bool = True

    analysis_store: str = "memory"
    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "nutrition_tracker"
    db_username: str = "nutrition_tracker"
    db_password: str = "secret"

    def missing_required(self) -> list[str]:
        """Return the names of required environment variables that are unset."""
        missing = []
        for env_name, attr in self.REQUIRED_ENV_VARS.items():
            if env_name == "OPENAI_API_KEY" and self.analysis_provider.lower() == "example":
                continue
            if not str(getattr(self, attr)).strip():
                missing.append(env_name)
        return missing

import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from core.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model: str = "gpt-4"
    openai_intro_model: str = "gpt-3.5-turbo"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 3000
    openai_timeout: float = 60.0

    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./trek.db")

    firebase_credentials_file: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    firebase_project_id: str | None = os.getenv("FIREBASE_PROJECT_ID")
    firebase_client_email: str | None = os.getenv("FIREBASE_CLIENT_EMAIL")
    firebase_private_key: str | None = os.getenv("FIREBASE_PRIVATE_KEY")

    stripe_secret_key: str | None = os.getenv("STRIPE_SECRET_KEY")
    stripe_webhook_secret: str | None = os.getenv("STRIPE_WEBHOOK_SECRET")
    stripe_basic_plan_monthly_id: str = "free"
    stripe_basic_plan_annual_id: str = "free"
    stripe_pro_plan_monthly_id: str | None = None
    stripe_pro_plan_annual_id: str | None = None

    frontend_url: str = "https://smarttrails.pro"
    cors_origins: str = "http://localhost:3000,http://localhost:8080,https://smarttrails.pro,https://www.smarttrails.pro"

    free_monthly_generations: int = 5
    log_level: str = "INFO"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def missing_keys(self) -> list[str]:
        missing = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.stripe_secret_key:
            missing.append("STRIPE_SECRET_KEY")
        if not self.stripe_webhook_secret:
            missing.append("STRIPE_WEBHOOK_SECRET")

        # either a service account file or the three inline credentials
        if not self.firebase_credentials_file:
            for key, value in (
                ("FIREBASE_PROJECT_ID", self.firebase_project_id),
                ("FIREBASE_CLIENT_EMAIL", self.firebase_client_email),
                ("FIREBASE_PRIVATE_KEY", self.firebase_private_key),
            ):
                if not value:
                    missing.append(key)
        return missing


def validate_settings(settings: Settings) -> Settings:
    missing = settings.missing_keys()
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
    return settings


@lru_cache
def get_settings() -> Settings:
    return Settings()

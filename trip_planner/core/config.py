from pydantic_settings import BaseSettings, SettingsConfigDict

from trip_planner.gateway.types import (
    DEFAULT_API_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenRouter
    openrouter_api_key: str = ""
    openrouter_api_url: str = DEFAULT_API_URL
    openrouter_timeout: float = DEFAULT_TIMEOUT
    openrouter_max_retries: int = DEFAULT_MAX_RETRIES
    openrouter_default_model: str = DEFAULT_MODEL

    # App
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if not settings.openrouter_api_key:
        errors.append("OPENROUTER_API_KEY must be set")

    if settings.openrouter_timeout <= 0:
        errors.append("OPENROUTER_TIMEOUT must be positive")

    if settings.openrouter_max_retries < 0:
        errors.append("OPENROUTER_MAX_RETRIES must not be negative")

    if settings.app_env == "production" and not settings.openrouter_api_url.startswith("https://"):
        errors.append("OPENROUTER_API_URL must use https in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))

"""
Application configuration using Pydantic Settings.
Loads from environment variables with validation.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_name: str = "Conatus"
    app_env: str = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    cors_origins: list = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Frontend
    frontend_url: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # Empty means console only, set to path for file logging
    log_json: bool = False  # Use JSON format for logs (recommended for production)

    # Conditional logic
    condition_max_nesting_level: int = 2  # Root group is level 0
    condition_max_conditions: int = 100  # Leaf conditions per expression
    default_timezone: str = "UTC"  # Used for system.time / system.date facts

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


settings = get_settings()

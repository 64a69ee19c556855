"""
Application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "Ledgerwise"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./ledgerwise.db"

    # Scope: the gateway in front of the API sets this header after auth
    household_header: str = "X-Household-ID"

    # Alerts
    missed_recurring_days: int = 40
    unusual_expense_multiplier: int = 3
    unusual_expense_minimum: int = 200

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )


# Global settings instance
settings = Settings()

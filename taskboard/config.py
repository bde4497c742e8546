"""
Configuration module for the Taskboard API
Loads settings from the environment and an optional .env file
"""
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Taskboard API"
    api_prefix: str = ""
    host: str = "0.0.0.0"
    port: int = 5000

    # Storage
    database_url: str = "sqlite:///./taskboard.db"
    storage_backend: Literal["sql", "memory"] = "sql"
    sql_echo: bool = False

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 12

    # Login rate limiting (attempts per window, per email)
    login_rate_limit: int = 10
    login_rate_window_seconds: int = 60

    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:8081",
        "http://localhost:8082",
    ]
    log_level: str = "INFO"

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        # Hosted Postgres providers still hand out the legacy scheme
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v


settings = Settings()

__all__ = ["Settings", "settings"]

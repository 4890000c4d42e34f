from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Built once at process start and handed to the components that need it.
    Construction fails when required secrets are missing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]

    cors_origin_regex: str | None = None
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Storage
    storage_backend: Literal["supabase", "memory"] = "supabase"

    # Supabase
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None

    # Sessions
    session_secret: str
    session_cookie_name: str = "session"
    session_ttl_seconds: int = 7 * 24 * 60 * 60
    password_hash_iterations: int = 260_000

    # Authentication security settings
    max_login_attempts: int = 5  # Maximum failed login attempts before rate limiting
    login_attempt_window: int = 300  # Time window for login attempts (5 minutes)
    enable_rate_limiting: bool = True  # Enable rate limiting for auth endpoints

    @model_validator(mode="after")
    def check_required_secrets(self) -> Settings:
        if not self.session_secret.strip():
            raise ValueError("session_secret must not be empty")
        if self.storage_backend == "supabase" and not (self.supabase_url and self.supabase_service_role_key):
            raise ValueError("supabase_url and supabase_service_role_key are required for the supabase backend")
        return self

    @property
    def cookie_secure(self) -> bool:
        return self.environment == "production"

    @property
    def external_auth_enabled(self) -> bool:
        """Supabase Auth bearer tokens are honoured only when an anon key is configured."""
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment once per process."""
    return Settings()

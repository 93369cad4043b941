"""Application settings via pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with KINGDOM_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="KINGDOM_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Storage ---
    data_dir: str = "data"
    shared_database_name: str = "main"
    sqlite_busy_timeout: float = 30.0
    patch_notes_file: str = "patch-notes.json"

    # --- Rate limiting (empty redis_url disables it) ---
    redis_url: str = ""
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60

    # --- JWT ---
    jwt_secret: str = "change-me-in-production-kingdom-manager-secret"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24
    jwt_issuer: str = "kingdom-manager"

    # --- Users ---
    password_min_length: int = 6
    password_max_length: int = 128
    admin_username: str = "admin"
    admin_password: str = "admin123"

    @property
    def data_path(self) -> Path:
        """Directory holding the shared store, tenant stores and patch notes."""
        return Path(self.data_dir)

    @property
    def shared_database_path(self) -> Path:
        return self.data_path / f"{self.shared_database_name}.db"

    @property
    def patch_notes_path(self) -> Path:
        return self.data_path / self.patch_notes_file


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

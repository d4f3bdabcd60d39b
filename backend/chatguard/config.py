"""
ChatGuard Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py (app factory) and the `python -m chatguard` entry point.
When:  Loaded once at module import time; validated again before the app starts.

Environment variables keep the names the service has always used
(PORT, APP_ENV, ALLOWED_ORIGINS), so existing deployments keep working.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Attributes are grouped by concern for readability.
    """

    # ── Environment ───────────────────────────────────────────────────────
    # Valid: development, production, test
    app_env: str = Field(default="development")

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Normalizes and checks the deployment environment name."""
        lower = v.strip().lower()
        valid_envs = {"development", "production", "test"}
        if lower not in valid_envs:
            raise ValueError(f"Invalid app_env '{v}'. Must be one of: {valid_envs}")
        return lower

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated origins. Empty means "allow any origin"
    # (development default); set it explicitly in production.
    allowed_origins: str = Field(default="")

    @property
    def allowed_origins_list(self) -> List[str]:
        """Splits ALLOWED_ORIGINS into a list, dropping blank entries."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # ── Request Body ──────────────────────────────────────────────────────
    # Upper bound on the raw JSON body accepted by POST /chat (1 MiB)
    max_body_bytes: int = Field(default=1_048_576, ge=1024, le=10_485_760)

    # ── Chat Input ────────────────────────────────────────────────────────
    max_message_length: int = Field(default=500, ge=1, le=100_000)
    preview_length: int = Field(default=50, ge=0, le=1000)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Per-client sliding window: at most N requests in any W milliseconds
    rate_limit_requests: int = Field(default=5, ge=1, le=10_000)
    rate_limit_window_ms: int = Field(default=15_000, ge=1, le=86_400_000)

    # Bounds on the in-memory request log
    rate_limit_max_clients: int = Field(default=10_000, ge=1)
    rate_limit_sweep_interval: int = Field(default=1000, ge=1)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Checks settings that are only mandatory in production.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises a single ValueError.
        """
        errors = []
        if self.is_production and not self.allowed_origins_list:
            errors.append(
                "ALLOWED_ORIGINS is empty. "
                "Production deployments must list the frontend origins explicitly."
            )
        if self.is_production and self.log_level == "DEBUG":
            errors.append("LOG_LEVEL=DEBUG is not allowed in production.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, used when create_app() is called without explicit settings
settings = Settings()

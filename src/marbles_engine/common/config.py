"""Marbles-Engine configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "api_key": "insecure-admin-key-change-me",
}


class MarblesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MARBLES_")

    environment: str = "development"
    log_level: str = "INFO"

    # Database backing the ledger world state and key history
    db_url: str = "sqlite+aiosqlite:///./data/marbles.db"

    # API
    api_title: str = "Marbles-Engine"
    api_version: str = "0.1.0"
    api_key: str = "insecure-admin-key-change-me"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Argument sanitisation
    max_arg_length: int = 32

    # How many leading stages count a reviewer as "relevant" to a marble.
    # 4 keeps the historic stage 0-3 window; 8 checks every stage.
    relevance_stage_window: int = 4

    # Key ranges scanned by directory queries
    marble_key_start: str = "m0"
    marble_key_end: str = "m9999999999999999999"
    user_key_start: str = "o0"
    user_key_end: str = "o9999999999999999999"

    # Compatible UI version written by the init function
    ui_version: str = "4.0.1"

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"MARBLES_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default API key, set MARBLES_API_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> MarblesSettings:
    settings = MarblesSettings()
    settings.validate_for_production()
    return settings

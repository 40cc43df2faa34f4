"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. TESSERA_ENV_FILE environment variable (absolute path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Uses pydantic-settings for automatic type coercion and validation.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if parent == Path("/app"):
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. TESSERA_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("TESSERA_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


MIN_BCRYPT_ROUNDS = 12


class Settings(BaseSettings):
    """Identity core configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Token signing secrets, one per token type.
    # Only the access secret is mandatory; a type whose secret is unset
    # cannot be issued or verified.
    jwt_access_secret: SecretStr
    jwt_refresh_secret: SecretStr | None = None
    jwt_email_verification_secret: SecretStr | None = None
    jwt_password_reset_secret: SecretStr | None = None

    # Token lifetimes
    jwt_access_token_expire_minutes: int = 15
    jwt_refresh_token_expire_days: int = 7
    jwt_email_verification_expire_hours: int = 24
    jwt_password_reset_expire_hours: int = 1
    jwt_issuer: str = "tessera"

    # Credential hashing
    bcrypt_rounds: int = 12

    # Password policy
    password_forbidden_words: str = ""  # Empty = built-in list
    password_reset_max_per_day: int = 3

    @field_validator("password_forbidden_words", mode="before")
    @classmethod
    def _validate_forbidden_words(cls, v: Any) -> str:
        """Ensure forbidden words are stored as comma-separated string."""
        if isinstance(v, (list, tuple)):
            return ",".join(v)
        return str(v) if v else ""

    @field_validator("bcrypt_rounds")
    @classmethod
    def _validate_bcrypt_rounds(cls, v: int) -> int:
        # Lower costs are only for test hashers built directly
        if not MIN_BCRYPT_ROUNDS <= v <= 31:
            msg = f"bcrypt_rounds must be between {MIN_BCRYPT_ROUNDS} and 31"
            raise ValueError(msg)
        return v

    # Database (POSTGRES_ prefix)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = SecretStr("")
    postgres_db: str = "tessera"

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Construct the database URL from components."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password.get_secret_value()}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def forbidden_words(self) -> list[str]:
        """Parse the forbidden password words from comma-separated string."""
        return [
            w.strip().lower()
            for w in self.password_forbidden_words.split(",")
            if w.strip()
        ]


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    JWT_ACCESS_SECRET must be provided via environment variables or .env file.
    """
    return Settings()  # type: ignore[call-arg]  # pydantic-settings loads from env


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()

"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./docchat.db"
    create_schema_on_startup: bool = True

    # Document storage
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 10 * 1024 * 1024
    context_max_chars: int = 6000

    # Sessions
    jwt_secret: SecretStr = SecretStr("")
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    session_cookie_name: str = "token"
    # Production: Secure cookie with SameSite=None for cross-site frontends
    cookie_secure: bool = False
    password_hash_rounds: int = 12

    # UI
    cors_origins: list[str] = ["http://localhost:5173"]

    # Inference service (OpenAI-compatible chat completions)
    inference_api_key: SecretStr | None = None
    inference_base_url: str = "https://api.groq.com/openai/v1"
    inference_model: str = "openai/gpt-oss-20b"
    inference_temperature: float = 0.0
    inference_max_tokens: int = 700
    inference_timeout_seconds: float = 30.0
    inference_max_retries: int = 2

    # Grounding instructions
    prompt_version: str = "v1"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

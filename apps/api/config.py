"""
Application configuration using Pydantic Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./videoshare.db"
    SQL_ECHO: bool = False
    AUTO_CREATE_DB_SCHEMA: bool = True

    # Redis (rate limiting)
    REDIS_URL: str = "redis://localhost:6379"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Rate limiting keys on the socket peer; X-Forwarded-For is honoured only
    # when that peer is one of these reverse proxies.
    TRUSTED_PROXY_HOSTS: List[str] = []

    # Blob storage
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_VIDEO_UPLOAD_BYTES: int = 500 * 1024 * 1024

    # Security
    JWT_SECRET: str = "change_me_in_production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24 * 7
    PASSWORD_HASH_ITERATIONS: int = 390000
    ALLOW_INSECURE_DEFAULTS: bool = False

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()


def validate_security_settings() -> None:
    """Fail fast when insecure default secrets are still configured."""
    if settings.ALLOW_INSECURE_DEFAULTS:
        return
    insecure_values = {
        "",
        "change_me_in_production",
        "your-secret-key",
    }
    jwt_secret = (settings.JWT_SECRET or "").strip()
    if jwt_secret in insecure_values or len(jwt_secret) < 24:
        raise ValueError("JWT_SECRET is insecure. Configure a strong non-default secret (>=24 chars).")

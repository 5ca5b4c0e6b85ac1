"""
Configuration settings for BranchChat backend.
Uses pydantic-settings for environment variable support.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Dict
import secrets
import logging
import os


logger = logging.getLogger(__name__)

# backend/branchchat/config.py -> backend/
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def get_or_create_secret_key():
    """Get secret key from file or generate a new one."""
    secret_file = os.path.join(BASE_DIR, ".secret_key")
    if os.path.exists(secret_file):
        try:
            with open(secret_file, "r") as f:
                return f.read().strip()
        except OSError as e:
            logger.warning("Could not read %s: %s", secret_file, e)

    key = secrets.token_urlsafe(32)
    try:
        with open(secret_file, "w") as f:
            f.write(key)
    except OSError:
        # Read-only filesystem: the key only lives for this process
        logger.warning("Could not persist secret key; tokens will not survive a restart")

    return key


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "BranchChat"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = f"sqlite+aiosqlite:///{os.path.join(BASE_DIR, 'branchchat.db')}"

    # Bearer token identity
    SECRET_KEY: str = Field(default_factory=get_or_create_secret_key)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # Upstream LLM calls
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 2000
    LLM_TIMEOUT_SECONDS: float = 60.0
    # provider id -> base URL, replaces the registry default
    PROVIDER_BASE_URLS: Dict[str, str] = {}

    # Read-time defaults for users without stored settings
    DEFAULT_PROVIDER: str = "google"
    DEFAULT_MODEL: str = "gemini-2.0-flash"
    DEFAULT_TEMPERATURE: float = 0.7
    DEFAULT_MAX_TOKENS: int = 2000
    DEFAULT_THEME: str = "light"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

"""
Configuration settings for PrepTrack backend.
Uses pydantic-settings for environment variable support.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Dict, List
import logging
import secrets
import os


logger = logging.getLogger(__name__)


def get_or_create_secret_key():
    """Get secret key from file or generate a new one."""
    secret_file = ".secret_key"
    if os.path.exists(secret_file):
        try:
            with open(secret_file, "r") as f:
                return f.read().strip()
        except OSError as e:
            logger.warning(f"Could not read {secret_file}: {e}")

    key = secrets.token_urlsafe(32)
    try:
        with open(secret_file, "w") as f:
            f.write(key)
    except OSError:
        # Read-only filesystem: the key only lives for this process
        logger.warning("Could not persist secret key, tokens will not survive a restart")

    return key


DEFAULT_CHAPTERS = {
    "physics": ["Elasticity", "Capacitance", "Electrostatics", "Current electricity"],
    "chemistry": ["p block", "Coordination compounds"],
    "biology": [
        "Microbes",
        "Tissue culture",
        "Biotechnology:PP",
        "The living world",
        "Biotech: Applications",
        "Human health and diseases",
    ],
}


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "PrepTrack"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    # resolved relative to this config file (backend/preptrack/config.py -> backend/preptrack.db)
    _BASE_DIR: str = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    DATABASE_URL: str = f"sqlite+aiosqlite:///{os.path.join(_BASE_DIR, 'preptrack.db')}"

    # JWT Authentication
    SECRET_KEY: str = Field(default_factory=get_or_create_secret_key)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Moderators
    ADMIN_USERNAMES: List[str] = []

    # Messaging
    MESSAGE_MAX_LENGTH: int = 1000
    CHAT_HISTORY_LIMIT: int = 50
    CHAT_HISTORY_MAX_LIMIT: int = 200
    CONVERSATION_LIST_LIMIT: int = 50

    # Presence - heartbeat must stay below the offline timeout
    PRESENCE_OFFLINE_TIMEOUT_SECONDS: float = 2.0
    PRESENCE_HEARTBEAT_INTERVAL_SECONDS: float = 1.0
    TYPING_TIMEOUT_SECONDS: float = 3.0

    # Practice chapters seeded on first read
    DEFAULT_CHAPTERS: Dict[str, List[str]] = DEFAULT_CHAPTERS

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

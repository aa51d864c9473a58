"""
Core settings and environment variables for the Participium lifecycle engine.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Participium Lifecycle Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # In-memory stores for local development and tests (no Firebase credentials)
    USE_MOCK_DB: bool = False

    # Optional JSON file replacing the default category -> office table
    OFFICE_ROUTING_PATH: Optional[str] = None

    # Caller-side retries when a report changed between read and write
    CONFLICT_RETRY_ATTEMPTS: int = 3

    COMMENT_MAX_LENGTH: int = 1000


# Global settings instance
settings = Settings()

"""Application Configuration"""

from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "School Fee Mirror"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS (3000 = dashboard frontend dev server)
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001,http://localhost:5173"
    ALLOWED_HEADERS: str = "*"

    # Calendar used for "current month" and "today" in billing calculations
    TIMEZONE: str = "UTC"

    # Firestore (the desktop app's real-time store)
    FIRESTORE_PROJECT_ID: str = ""
    FIRESTORE_API_KEY: str = ""
    FIRESTORE_BASE_URL: str = "https://firestore.googleapis.com/v1"
    FIRESTORE_PAGE_SIZE: int = 300
    FIRESTORE_TIMEOUT: float = 30.0

    # Mirror
    MIRROR_POLL_SECONDS: float = 30.0
    SNAPSHOT_DEBOUNCE_SECONDS: float = 1.0
    MIRROR_SEED_FILE: Optional[str] = None

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list"""
        return [origin.strip() for origin in v.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def mirror_enabled(self) -> bool:
        """Firestore polling runs only when a project is configured"""
        return bool(self.FIRESTORE_PROJECT_ID)


# Global settings instance
settings = Settings()

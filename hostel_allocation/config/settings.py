"""
Environment configuration for the hostel allocation service.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = "Hostel Allocation Service"
    API_VERSION: str = "v1"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = ["*"]
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./hostel_allocation.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_POOL_OVERFLOW: int = 10
    DB_CONNECT_ARGS: Dict[str, Any] = {}

    # Side-effect dispatch
    SIDE_EFFECT_WORKERS: int = 4
    SIDE_EFFECT_MAX_RETRIES: int = 3
    SIDE_EFFECT_RETRY_DELAY: float = 0.5
    NOTIFICATIONS_ENABLED: bool = True

    # Identifier generation
    PUBLIC_SLUG_LENGTH: int = 10
    IDENTIFIER_MAX_ATTEMPTS: int = 5

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False
    SENTRY_DSN: Optional[str] = None

    # Validators
    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator('SIDE_EFFECT_MAX_RETRIES', 'IDENTIFIER_MAX_ATTEMPTS', 'SIDE_EFFECT_WORKERS')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    def get_database_url(self) -> str:
        """Get the configured database URL"""
        return self.DATABASE_URL

    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"

    def public_asset_url(self, public_slug: str) -> str:
        """Public landing URL encoded into an asset's QR label"""
        return f"{self.FRONTEND_BASE_URL.rstrip('/')}/p/{public_slug}"

    def resident_room_url(self, resident_id: str) -> str:
        return f"{self.FRONTEND_BASE_URL.rstrip('/')}/residents/{resident_id}/room"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

"""
Application Configuration
Loads settings from environment variables
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional


# Static key the legacy system shipped with; refusing it forces a real secret
LEGACY_FALLBACK_SECRET = "fallback-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from .env file"""

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "FOM Certificates"
    APP_URL: str = "http://localhost:8000"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./fomcert.db"

    # Certificate security
    CERTIFICATE_SECRET_KEY: str
    DEFAULT_ORGANIZATION_ID: str = "fom"

    # Render service (headless browser)
    RENDER_SERVICE_URL: str = "http://localhost:3001"
    RENDER_TIMEOUT_SECONDS: float = 30.0

    # QR payloads point at the public site when set, APP_URL otherwise
    PUBLIC_BASE_URL: Optional[str] = None

    @field_validator("CERTIFICATE_SECRET_KEY")
    @classmethod
    def secret_key_must_be_real(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("CERTIFICATE_SECRET_KEY must not be empty")
        if value == LEGACY_FALLBACK_SECRET:
            raise ValueError("CERTIFICATE_SECRET_KEY is set to the legacy default, configure a real secret")
        return value

    @property
    def verification_base_url(self) -> str:
        return (self.PUBLIC_BASE_URL or self.APP_URL).rstrip("/")

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()

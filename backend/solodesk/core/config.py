"""Application configuration"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_V1_PREFIX: str = "/api"
    PROJECT_NAME: str = "SoloDesk API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 1440  # 24 hours

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./solodesk.db"

    # URLs
    API_BASE_URL: str = "http://localhost:8000"

    # HTTP client (solodesk.client)
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Email templates
    # WHY: Matches the editor's profile stale time (5 minutes)
    PROFILE_CACHE_TTL_SECONDS: int = 300
    # WHY: A 404 on template save has historically been reported as success.
    # Turning this off makes the persistence client raise instead.
    TEMPLATE_SAVE_DEMO_MODE: bool = True
    TEMPLATE_DIR: Optional[str] = None  # defaults to solodesk/templates/email

    # Uploads
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_SIZE_BYTES: int = 10 * 1024 * 1024

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


settings = Settings()

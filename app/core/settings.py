"""
Core settings and environment variables for Noise Report Hub.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Noise Report Hub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - comma-separated origins. The mobile client does not need CORS,
    # only the admin web dashboard does.
    CORS_ORIGINS: str = "http://localhost:8081,http://localhost:19006,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIREBASE_STORAGE_BUCKET: Optional[str] = None

    # Mock DB mode for local development without Firebase credentials
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: Optional[str] = "./mock_db.json"

    # Media storage. With USE_MOCK_STORAGE the files land under MEDIA_ROOT
    # and are addressed as MEDIA_BASE_URL/<object name>.
    USE_MOCK_STORAGE: bool = False
    MEDIA_ROOT: str = "./media"
    MEDIA_BASE_URL: str = "http://localhost:5000/media"
    MAX_MEDIA_BYTES: int = 50 * 1024 * 1024

    # Collections
    REPORTS_COLLECTION: str = "noise_reports"
    USERS_COLLECTION: str = "users"

    # Auth
    JWT_SECRET: str = "dev-secret-change"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24  # 1 day
    EMAIL_VERIFY_BASE_URL: str = "http://localhost:5000/auth/verify-email"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()

"""
Configuration settings for the application
"""

import os
from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./helping_hands.db")
    DB_TIMEOUT_SECONDS: float = float(os.getenv("DB_TIMEOUT_SECONDS", "10"))
    DB_CONNECT_RETRIES: int = int(os.getenv("DB_CONNECT_RETRIES", "3"))
    DB_CONNECT_RETRY_DELAY: float = float(os.getenv("DB_CONNECT_RETRY_DELAY", "2"))
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")

    # Application
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    CLIENT_URL: Optional[str] = os.getenv("CLIENT_URL")
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:5175",
        "http://localhost:3000",
        "https://helping-hands-client.vercel.app",
    ]
    ALLOW_ORIGIN_REGEX: str = r"http://localhost(:\d+)?"
    ALLOW_METHODS: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    ALLOW_HEADERS: List[str] = ["Content-Type", "Authorization", "Accept"]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 12
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"

    @property
    def cors_origins(self) -> List[str]:
        """Configured origins plus the deployed client, if any"""
        origins = list(self.ALLOW_ORIGINS)
        if self.CLIENT_URL and self.CLIENT_URL not in origins:
            origins.append(self.CLIENT_URL)
        return origins

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

settings = Settings()

import os
from functools import lru_cache
from typing import List, Literal, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True, frozen=True, extra="ignore")

    # --- APP INFO ---
    PROJECT_NAME: str = "Vessel Issue Reporting"
    API_V1_STR: str = "/api/v1"
    APP_URL: str = os.getenv("NEXT_PUBLIC_APP_URL") or "http://localhost:3000"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # --- SECURITY ---
    SECRET_KEY: str = os.getenv("JWT_SECRET", "fleet_dev_secret_change_me")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    SESSION_COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False

    # --- DATABASE ---
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = os.getenv("DB_USER", "fleet")
    POSTGRES_PASSWORD: str = os.getenv("DB_PASSWORD", "fleet")
    POSTGRES_SERVER: str = os.getenv("DB_HOST", "localhost")
    POSTGRES_PORT: str = os.getenv("DB_PORT", "5432")
    POSTGRES_DB: str = os.getenv("DB_NAME", "fleet")
    SQL_ECHO: bool = False

    # --- EMAIL ---
    RESEND_API_KEY: Optional[str] = None
    MAIL_FROM: str = os.getenv("FROM_EMAIL", "noreply@example.com")
    RESET_TOKEN_EXPIRE_HOURS: int = 1

    # --- QUOTAS ---
    MAX_ACTIVE_VESSEL_ASSIGNMENTS: int = 3
    MAX_OPEN_ISSUES_PER_CREW: int = 3
    QUOTA_ENFORCEMENT: Literal["enforce", "advisory"] = "enforce"

    # --- MAINTENANCE ---
    INSPECTION_INTERVAL_DAYS: int = 90

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        Async connection string. DATABASE_URL wins when set, otherwise the
        PostgreSQL URL is built from the POSTGRES_* parts.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # Encodes 'p@ss' -> 'p%40ss' so the URL doesn't break
        encoded_password = quote_plus(self.POSTGRES_PASSWORD)

        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{encoded_password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

from functools import lru_cache
from typing import Optional
from uuid import UUID

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Edhub360 Degree Roadmap Service"
    BACKEND_CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "https://edhub360.github.io",
        "https://app.edhub360.com",
    ]

    DATABASE_URL: str = "postgresql+asyncpg://localhost/edhub360"
    DB_ECHO: bool = False
    JWT_SECRET_KEY: str = "change-me-in-production-0123456789abcdef"
    JWT_ALGORITHM: str = "HS256"
    # Requests without a bearer token act as this student; unset rejects them
    DEV_USER_ID: Optional[UUID] = None

    # Roadmap generation
    AREA_PRIORITY: list[str] = [
        "GEN-ENG",
        "GEN-MATH",
        "GEN-SCI",
        "GEN-SOC",
        "GEN-HUM",
        "GEN-COM",
        "GEN-OPEN",
        "MAJOR-CORE",
        "MAJOR-CAP",
        "ELECTIVES",
    ]
    ELECTIVE_AREA_CODE: str = "ELECTIVES"
    CAPSTONE_AREA_CODE: str = "MAJOR-CAP"
    RESIDENCY_PROVIDER: str = "University"
    CREDIT_CEILING_SLACK: int = 4
    DEFAULT_PACE_HOURS_PER_WEEK: int = 12
    DEFAULT_PACE_MONTHS: int = 12

    # Financial rules
    PROGRAM_FEE: float = 7000.0
    SESSION_COST: float = 1800.0
    BASELINE_SESSIONS: int = 2
    BUDGET_CEILING: float = 15000.0
    CARD_FEE_PCT: float = 3.0
    ACH_FEE_PCT: float = 0.8
    WIRE_FEE_FLAT: float = 25.0
    DURATION_MULTIPLIERS: dict[int, float] = {}


@lru_cache
def get_settings() -> Settings:
    return Settings()

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ──
    APP_NAME: str = "Progress Bars API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # ── Database ──
    POSTGRES_USER: str = "progress_user"
    POSTGRES_PASSWORD: str = "progress_secret"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "progress_db"
    # Ex.: sqlite+aiosqlite:///./progress.db
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """URL síncrona para Alembic."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE.replace("+aiosqlite", "").replace("+asyncpg", "")
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # ── CORS ──
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # ── Atualização automática ──
    REFRESH_INTERVAL_SECONDS: float = 60.0
    AUTO_UPDATE_ENABLED: bool = True
    AUTO_UPDATE_INTERVAL_SECONDS: float = 60.0

    # ── Regras de validação / cache ──
    HISTORICAL_LIMIT_YEARS: int = 10
    CALCULATION_CACHE_SIZE: int = 1000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

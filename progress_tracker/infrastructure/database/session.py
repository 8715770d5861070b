"""
Engine e sessões async do record store.

PostgreSQL (asyncpg) em produção; `DATABASE_URL_OVERRIDE` permite SQLite
(aiosqlite) para desenvolvimento local e testes.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from progress_tracker.infrastructure.config import get_settings


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    options: dict[str, Any] = {"echo": echo}
    if not url.startswith("sqlite"):
        # SQLite em arquivo não tem conexões para "pingar"
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


settings = get_settings()
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

AsyncSessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Metadata compartilhada pelos modelos e pelo Alembic."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Sessão por request. O commit fica com o UnitOfWork; aqui só rollback em erro."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

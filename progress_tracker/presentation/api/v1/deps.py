"""Factories de DI: repositório, UoW, relógio e regras vindas da config."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from progress_tracker.application.shared.unit_of_work import UnitOfWork
from progress_tracker.application.systems.bars.use_cases import Clock
from progress_tracker.domain.shared.dates import utcnow
from progress_tracker.infrastructure.config import get_settings
from progress_tracker.infrastructure.database import get_db
from progress_tracker.infrastructure.systems.bars.repository import ProgressBarRepository


def get_uow(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


def get_bar_repo(db: AsyncSession = Depends(get_db)) -> ProgressBarRepository:
    return ProgressBarRepository(db)


def get_clock() -> Clock:
    # Sobrescrito nos testes via app.dependency_overrides
    return utcnow


def get_historical_limit_years() -> int:
    return get_settings().HISTORICAL_LIMIT_YEARS

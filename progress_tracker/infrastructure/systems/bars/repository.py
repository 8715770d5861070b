"""Implementação concreta do record store de barras: SQLAlchemy."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_tracker.application.shared.unit_of_work import UnitOfWork
from progress_tracker.domain.shared.dates import as_utc
from progress_tracker.domain.systems.bars.entity import BarType, ProgressBar, TimeBasedType
from progress_tracker.domain.systems.bars.repository import IProgressBarRepository
from progress_tracker.infrastructure.database.models import ProgressBarModel
from progress_tracker.infrastructure.database.session import AsyncSessionLocal

# Campos que podem mudar depois da criação
_UPDATABLE_FIELDS = frozenset({
    "current_value",
    "target_value",
    "is_completed",
    "is_overdue",
    "updated_at",
})


def _utc_or_none(value):
    return as_utc(value) if value is not None else None


class ProgressBarRepository(IProgressBarRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── Helpers de mapeamento ──
    @staticmethod
    def _to_entity(model: ProgressBarModel) -> ProgressBar:
        # SQLite devolve datetimes naive; normaliza tudo para UTC
        return ProgressBar(
            id=model.id,
            title=model.title,
            description=model.description,
            bar_type=BarType(model.bar_type),
            time_based_type=TimeBasedType(model.time_based_type) if model.time_based_type else None,
            start_date=_utc_or_none(model.start_date),
            target_date=_utc_or_none(model.target_date),
            current_value=model.current_value,
            target_value=model.target_value,
            is_completed=model.is_completed,
            is_overdue=model.is_overdue,
            created_at=_utc_or_none(model.created_at),
            updated_at=_utc_or_none(model.updated_at),
        )

    async def create(self, bar: ProgressBar) -> ProgressBar:
        model = ProgressBarModel(
            id=bar.id or str(uuid.uuid4()),
            title=bar.title,
            description=bar.description,
            current_value=bar.current_value,
            target_value=bar.target_value,
            bar_type=bar.bar_type.value,
            start_date=bar.start_date,
            target_date=bar.target_date,
            time_based_type=bar.time_based_type.value if bar.time_based_type else None,
            is_completed=bar.is_completed,
            is_overdue=bar.is_overdue,
            created_at=bar.created_at,
            updated_at=bar.updated_at or bar.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def get_by_id(self, bar_id: str) -> Optional[ProgressBar]:
        model = await self._session.get(ProgressBarModel, bar_id)
        return self._to_entity(model) if model else None

    async def update(self, bar_id: str, changes: Mapping[str, Any]) -> Optional[ProgressBar]:
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Campos não atualizáveis: {sorted(unknown)}")

        model = await self._session.get(ProgressBarModel, bar_id)
        if not model:
            return None
        for name, value in changes.items():
            setattr(model, name, value)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, bar_id: str) -> None:
        model = await self._session.get(ProgressBarModel, bar_id)
        if model:
            await self._session.delete(model)
            await self._session.flush()

    async def list_all(self) -> Sequence[ProgressBar]:
        stmt = select(ProgressBarModel).order_by(ProgressBarModel.created_at, ProgressBarModel.id)
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]


@asynccontextmanager
async def open_bar_store(
    session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
) -> AsyncIterator[tuple[ProgressBarRepository, UnitOfWork]]:
    """Sessão própria para trabalhos fora de um request (sweeper, seed)."""
    async with session_factory() as session:
        try:
            yield ProgressBarRepository(session), UnitOfWork(session)
        except Exception:
            await session.rollback()
            raise

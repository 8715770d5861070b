"""
Unit of Work: commit da sessão seguido do despacho de eventos.

Eventos só saem depois de um commit bem-sucedido; rollback os descarta.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from progress_tracker.application.shared.event_dispatcher import EventDispatcher, dispatcher
from progress_tracker.domain.events.base import AggregateRoot, DomainEvent


class UnitOfWork:
    def __init__(self, session: AsyncSession, events: Optional[EventDispatcher] = None) -> None:
        self._session = session
        self._dispatcher = events or dispatcher
        self._pending_events: list[DomainEvent] = []

    @property
    def session(self) -> AsyncSession:
        return self._session

    def collect_events_from(self, *aggregates: AggregateRoot) -> None:
        for agg in aggregates:
            self._pending_events.extend(agg.collect_events())

    async def commit(self) -> None:
        await self._session.commit()
        if self._pending_events:
            events, self._pending_events = self._pending_events, []
            await self._dispatcher.dispatch(events)

    async def rollback(self) -> None:
        await self._session.rollback()
        self._pending_events.clear()

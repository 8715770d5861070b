"""
Eventos de domínio das barras de progresso.

A entidade registra o que mudou (criação, conclusão, atraso); a camada de
aplicação coleta os eventos depois do commit e os despacha para handlers.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class DomainEvent:
    """Classe base para todos os eventos de domínio."""
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> str:
        return type(self).__name__


class AggregateRoot:
    """Mixin que acumula eventos até a aplicação recolhê-los."""

    def __init__(self) -> None:
        self._events: list[DomainEvent] = []

    def _record_event(self, event: DomainEvent) -> None:
        self._events.append(event)

    @property
    def has_pending_events(self) -> bool:
        return bool(self._events)

    def collect_events(self) -> list[DomainEvent]:
        events, self._events = self._events, []
        return events

"""
Dispatcher de eventos de domínio.

Recebe os eventos coletados das barras depois do commit e os entrega aos
handlers registrados. Falha de um handler é logada e não impede os demais.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Iterable, Type, Union

from progress_tracker.domain.events.base import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], Union[None, Awaitable[None]]]


class EventDispatcher:
    def __init__(self) -> None:
        # Registry: event_type → list[handler]
        self._handlers: dict[Type[DomainEvent], list[Handler]] = {}

    def register(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> list[Handler]:
        return list(self._handlers.get(event_type, []))

    async def dispatch(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            for handler in self.handlers_for(type(event)):
                try:
                    result = handler(event)
                    # Suporta handlers async e sync
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception(
                        "Erro ao despachar evento %s para handler %s",
                        event.event_type,
                        getattr(handler, "__name__", repr(handler)),
                    )

    def clear(self) -> None:
        """Limpa todos os handlers (útil em testes)."""
        self._handlers.clear()


dispatcher = EventDispatcher()

"""
Event Handlers: registram no log as mudanças de ciclo de vida das barras.

Registrados na inicialização da app (progress_tracker/main.py).
"""

from __future__ import annotations

import logging

from progress_tracker.application.shared.event_dispatcher import EventDispatcher
from progress_tracker.domain.events.bar_events import (
    BarBecameOverdue,
    BarCompleted,
    BarCreated,
    BarDeleted,
    BarStatusChanged,
)

logger = logging.getLogger(__name__)


def handle_bar_created(event: BarCreated) -> None:
    logger.info("Barra %s criada (%s): %s", event.bar_id, event.time_based_type, event.title)


def handle_bar_completed(event: BarCompleted) -> None:
    logger.info("Barra %s concluída: %s", event.bar_id, event.title)


def handle_bar_overdue(event: BarBecameOverdue) -> None:
    logger.warning("Barra %s atrasada: %s", event.bar_id, event.title)


def handle_bar_status_changed(event: BarStatusChanged) -> None:
    logger.debug(
        "Barra %s status → completed=%s overdue=%s",
        event.bar_id, event.is_completed, event.is_overdue,
    )


def handle_bar_deleted(event: BarDeleted) -> None:
    logger.info("Barra %s removida", event.bar_id)


def register_all_handlers(target: EventDispatcher) -> None:
    target.register(BarCreated, handle_bar_created)
    target.register(BarCompleted, handle_bar_completed)
    target.register(BarBecameOverdue, handle_bar_overdue)
    target.register(BarStatusChanged, handle_bar_status_changed)
    target.register(BarDeleted, handle_bar_deleted)
    logger.info("Handlers de eventos de barras registrados")

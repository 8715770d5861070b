"""Eventos de domínio relacionados a barras de progresso."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from progress_tracker.domain.events.base import DomainEvent


@dataclass(frozen=True)
class BarCreated(DomainEvent):
    bar_id: str = ""
    title: str = ""
    time_based_type: Optional[str] = None


@dataclass(frozen=True)
class BarCompleted(DomainEvent):
    bar_id: str = ""
    title: str = ""


@dataclass(frozen=True)
class BarBecameOverdue(DomainEvent):
    bar_id: str = ""
    title: str = ""


@dataclass(frozen=True)
class BarStatusChanged(DomainEvent):
    bar_id: str = ""
    is_completed: bool = False
    is_overdue: bool = False


@dataclass(frozen=True)
class BarDeleted(DomainEvent):
    bar_id: str = ""

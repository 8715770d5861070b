"""Entidade de domínio ProgressBar: estado derivado e eventos de status."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from progress_tracker.domain.events.base import AggregateRoot
from progress_tracker.domain.events.bar_events import (
    BarBecameOverdue,
    BarCompleted,
    BarCreated,
    BarDeleted,
    BarStatusChanged,
)
from progress_tracker.domain.shared.dates import DateInput, utcnow

if TYPE_CHECKING:
    from progress_tracker.domain.systems.bars.calculator import ProgressCalculation


class BarType(str, enum.Enum):
    MANUAL = "manual"
    TIME_BASED = "time-based"


class TimeBasedType(str, enum.Enum):
    COUNT_UP = "count-up"
    COUNT_DOWN = "count-down"
    ARRIVAL_DATE = "arrival-date"


@dataclass(frozen=True)
class TimeBasedBarConfig:
    """Pedido de criação; as datas ainda não foram validadas."""
    title: str
    time_based_type: TimeBasedType
    start_date: DateInput
    target_date: DateInput
    description: Optional[str] = None


@dataclass
class ProgressBar(AggregateRoot):
    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    bar_type: BarType = BarType.TIME_BASED
    time_based_type: Optional[TimeBasedType] = None
    start_date: Optional[datetime] = None
    target_date: Optional[datetime] = None
    # Espelho do último cálculo; nunca é a fonte da verdade
    current_value: float = 0
    target_value: float = 0
    is_completed: bool = False
    is_overdue: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        AggregateRoot.__init__(self)

    def is_time_based(self) -> bool:
        return (
            self.bar_type == BarType.TIME_BASED
            and self.time_based_type is not None
            and self.start_date is not None
            and self.target_date is not None
        )

    # ── Status derivado ──

    def status_differs(self, calculation: "ProgressCalculation") -> bool:
        return (
            calculation.is_completed != self.is_completed
            or calculation.is_overdue != self.is_overdue
        )

    def apply_calculation(
        self,
        calculation: "ProgressCalculation",
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """Copia o cálculo para os campos espelhados e devolve as mudanças."""
        was_completed, was_overdue = self.is_completed, self.is_overdue

        self.is_completed = calculation.is_completed
        self.is_overdue = calculation.is_overdue
        self.current_value = calculation.current_value
        self.target_value = calculation.target_value
        self.updated_at = now or utcnow()

        if (was_completed, was_overdue) != (self.is_completed, self.is_overdue):
            self._record_event(BarStatusChanged(
                bar_id=self.id or "",
                is_completed=self.is_completed,
                is_overdue=self.is_overdue,
            ))
        if self.is_completed and not was_completed:
            self._record_event(BarCompleted(bar_id=self.id or "", title=self.title))
        if self.is_overdue and not was_overdue:
            self._record_event(BarBecameOverdue(bar_id=self.id or "", title=self.title))

        return {
            "is_completed": self.is_completed,
            "is_overdue": self.is_overdue,
            "current_value": self.current_value,
            "target_value": self.target_value,
            "updated_at": self.updated_at,
        }

    # ── Eventos auxiliares ──

    def record_creation(self) -> None:
        self._record_event(BarCreated(
            bar_id=self.id or "",
            title=self.title,
            time_based_type=self.time_based_type.value if self.time_based_type else None,
        ))

    def record_deletion(self) -> None:
        self._record_event(BarDeleted(bar_id=self.id or ""))

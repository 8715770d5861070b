"""DTOs da camada de aplicação para barras: commands, queries e resultados."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from progress_tracker.domain.shared.dates import DateInput
from progress_tracker.domain.systems.bars.calculator import ProgressCalculation


# ════════════════════════════════════════════════════════════════
# COMMANDS
# ════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CreateTimeBasedBarCommand:
    title: str
    time_based_type: str
    target_date: DateInput
    start_date: DateInput = None   # count-down: None = instante da criação
    description: Optional[str] = None


@dataclass(frozen=True)
class UpdateCompletionStatusCommand:
    bar_id: str


@dataclass(frozen=True)
class DeleteBarCommand:
    bar_id: str


# ════════════════════════════════════════════════════════════════
# QUERIES
# ════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GetBarProgressQuery:
    bar_id: str


# ════════════════════════════════════════════════════════════════
# RESULT DTOs
# ════════════════════════════════════════════════════════════════

@dataclass
class BarResult:
    id: str
    title: str
    description: Optional[str]
    bar_type: str
    time_based_type: Optional[str]
    start_date: Optional[datetime]
    target_date: Optional[datetime]
    current_value: float
    target_value: float
    is_completed: bool
    is_overdue: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    progress: Optional[ProgressCalculation] = None

"""
Schemas Pydantic: camada de Apresentação.

As datas de entrada chegam como texto: a validação de formato é regra de
domínio e precisa devolver os erros no mesmo formato das demais regras.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from progress_tracker.application.dtos.bar_dtos import BarResult
from progress_tracker.domain.shared.value_objects import Duration
from progress_tracker.domain.systems.bars.calculator import ProgressCalculation
from progress_tracker.domain.systems.bars.date_validator import format_duration


# ════════════════════════════════════════════════════════════════
# ERROR MODEL (para Swagger docs)
# ════════════════════════════════════════════════════════════════
class ValidationErrorOut(BaseModel):
    field: str = Field(..., examples=["target_date"])
    message: str = Field(..., examples=["Target date must be after start date"])
    code: str = Field(..., examples=["INVALID_DATE_RANGE"])


class ErrorResponse(BaseModel):
    error: str = Field(..., examples=["not_found"])
    detail: str = Field(..., examples=["Barra não encontrada"])
    errors: Optional[list[ValidationErrorOut]] = None
    request_id: Optional[str] = None

    model_config = {"json_schema_extra": {"example": {"error": "not_found", "detail": "Barra não encontrada", "request_id": "a1b2c3d4"}}}


# ════════════════════════════════════════════════════════════════
# BARS: REQUEST
# ════════════════════════════════════════════════════════════════
class TimeBasedTypeEnum(str, Enum):
    count_up = "count-up"
    count_down = "count-down"
    arrival_date = "arrival-date"


class BarCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, examples=["Viagem ao Japão"])
    description: Optional[str] = Field(None, max_length=2000)
    time_based_type: TimeBasedTypeEnum
    start_date: Optional[str] = Field(None, examples=["2024-01-01T00:00:00Z"])
    target_date: str = Field(..., examples=["2024-12-31T00:00:00Z"])

    model_config = {"json_schema_extra": {"example": {
        "title": "Viagem ao Japão",
        "time_based_type": "count-down",
        "target_date": "2030-04-01T00:00:00Z",
    }}}


# ════════════════════════════════════════════════════════════════
# BARS: RESPONSE
# ════════════════════════════════════════════════════════════════
class DurationOut(BaseModel):
    years: int
    months: int
    days: int
    hours: int
    minutes: int
    total_days: int
    total_hours: int
    total_minutes: int

    @classmethod
    def from_duration(cls, duration: Duration) -> "DurationOut":
        return cls(**duration.to_dict())


class ProgressOut(BaseModel):
    current_value: float
    target_value: float
    percentage: float
    elapsed_time: DurationOut
    remaining_time: DurationOut
    elapsed_text: str
    remaining_text: str
    daily_progress_rate: float
    estimated_completion_date: Optional[datetime] = None
    is_completed: bool
    is_overdue: bool

    @classmethod
    def from_calculation(cls, calc: ProgressCalculation) -> "ProgressOut":
        return cls(
            current_value=calc.current_value,
            target_value=calc.target_value,
            percentage=round(calc.percentage, 4),
            elapsed_time=DurationOut.from_duration(calc.elapsed_time),
            remaining_time=DurationOut.from_duration(calc.remaining_time),
            elapsed_text=format_duration(calc.elapsed_time),
            remaining_text=format_duration(calc.remaining_time),
            daily_progress_rate=calc.daily_progress_rate,
            estimated_completion_date=calc.estimated_completion_date,
            is_completed=calc.is_completed,
            is_overdue=calc.is_overdue,
        )


class BarOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    bar_type: str
    time_based_type: Optional[str] = None
    start_date: Optional[datetime] = None
    target_date: Optional[datetime] = None
    current_value: float
    target_value: float
    is_completed: bool
    is_overdue: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    progress: Optional[ProgressOut] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_result(cls, r: BarResult) -> "BarOut":
        return cls(
            id=r.id,
            title=r.title,
            description=r.description,
            bar_type=r.bar_type,
            time_based_type=r.time_based_type,
            start_date=r.start_date,
            target_date=r.target_date,
            current_value=r.current_value,
            target_value=r.target_value,
            is_completed=r.is_completed,
            is_overdue=r.is_overdue,
            created_at=r.created_at,
            updated_at=r.updated_at,
            progress=ProgressOut.from_calculation(r.progress) if r.progress else None,
        )

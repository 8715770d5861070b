"""
Validação e utilitários de datas para barras baseadas em tempo.

Funções puras: nenhuma lê estado global. Quando "agora" importa, o chamador
pode passar `now` explicitamente (testes determinísticos); o padrão é o
relógio real.
"""

from __future__ import annotations

import calendar
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from progress_tracker.domain.shared.dates import (
    DateInput,
    add_years,
    coerce_instant,
    difference_in_days,
    difference_in_years,
    utcnow,
)
from progress_tracker.domain.shared.value_objects import Duration

MAX_YEARS = 50
DEFAULT_HISTORICAL_LIMIT_YEARS = 10


class ValidationErrorCode(str, enum.Enum):
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    HISTORICAL_LIMIT_EXCEEDED = "HISTORICAL_LIMIT_EXCEEDED"
    FUTURE_START_DATE = "FUTURE_START_DATE"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str
    code: ValidationErrorCode

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code.value}


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def of(cls, errors: Sequence[ValidationError]) -> "ValidationResult":
        return cls(errors=tuple(errors))


# ════════════════════════════════════════════════════════════════
# VALIDADORES
# ════════════════════════════════════════════════════════════════

def validate_date_range(start_date: DateInput, target_date: DateInput) -> ValidationResult:
    """A data alvo precisa ser estritamente posterior à data de início."""
    errors: list[ValidationError] = []
    start = coerce_instant(start_date)
    target = coerce_instant(target_date)

    if start is None:
        errors.append(ValidationError(
            "start_date", "Start date is not a valid date", ValidationErrorCode.INVALID_DATE_FORMAT,
        ))
    if target is None:
        errors.append(ValidationError(
            "target_date", "Target date is not a valid date", ValidationErrorCode.INVALID_DATE_FORMAT,
        ))
    if errors:
        return ValidationResult.of(errors)

    if not target > start:
        errors.append(ValidationError(
            "target_date", "Target date must be after start date", ValidationErrorCode.INVALID_DATE_RANGE,
        ))
    return ValidationResult.of(errors)


def validate_historical_date(
    value: DateInput,
    max_years_in_past: int = DEFAULT_HISTORICAL_LIMIT_YEARS,
    now: Optional[datetime] = None,
) -> ValidationResult:
    instant = coerce_instant(value)
    if instant is None:
        return ValidationResult.of([ValidationError(
            "date", "Date is not a valid date", ValidationErrorCode.INVALID_DATE_FORMAT,
        )])

    min_date = add_years(coerce_instant(now) or utcnow(), -max_years_in_past)
    if instant < min_date:
        return ValidationResult.of([ValidationError(
            "date",
            f"Date cannot be more than {max_years_in_past} years in the past",
            ValidationErrorCode.HISTORICAL_LIMIT_EXCEEDED,
        )])
    return ValidationResult()


def validate_future_date(value: DateInput, now: Optional[datetime] = None) -> ValidationResult:
    instant = coerce_instant(value)
    if instant is None:
        return ValidationResult.of([ValidationError(
            "date", "Date is not a valid date", ValidationErrorCode.INVALID_DATE_FORMAT,
        )])

    if not instant > (coerce_instant(now) or utcnow()):
        return ValidationResult.of([ValidationError(
            "date", "Date must be in the future", ValidationErrorCode.FUTURE_START_DATE,
        )])
    return ValidationResult()


def validate_time_scale(start_date: DateInput, end_date: DateInput) -> ValidationResult:
    """Limita o intervalo a MAX_YEARS anos, em qualquer ordem."""
    start = coerce_instant(start_date)
    end = coerce_instant(end_date)
    if start is None or end is None:
        return ValidationResult.of([ValidationError(
            "date_range", "Invalid date format", ValidationErrorCode.INVALID_DATE_FORMAT,
        )])

    if abs(difference_in_years(end, start)) > MAX_YEARS:
        return ValidationResult.of([ValidationError(
            "date_range",
            f"Date range cannot exceed {MAX_YEARS} years",
            ValidationErrorCode.INVALID_DATE_RANGE,
        )])
    return ValidationResult()


# ════════════════════════════════════════════════════════════════
# CÁLCULOS EM DIAS
# ════════════════════════════════════════════════════════════════

def get_duration_in_days(start_date: datetime, end_date: datetime) -> int:
    return abs(difference_in_days(end_date, start_date))


def get_elapsed_days(start_date: datetime, current_date: datetime) -> int:
    """Dias decorridos desde o início; 0 se current_date for anterior."""
    return max(0, difference_in_days(current_date, start_date))


def count_leap_years(start_date: datetime, end_date: datetime) -> int:
    # Anos em UTC, para não deslocar a fronteira de ano pelo fuso local
    start_year = coerce_instant(start_date).year
    end_year = coerce_instant(end_date).year
    low, high = min(start_year, end_year), max(start_year, end_year)
    return calendar.leapdays(low, high + 1)


# ════════════════════════════════════════════════════════════════
# FORMATAÇÃO
# ════════════════════════════════════════════════════════════════

def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def format_duration(duration: Duration) -> str:
    """
    Texto legível, ex.: "2 years, 3 months, and 5 days".

    Horas e minutos só aparecem quando anos e meses são zero.
    """
    if duration.is_zero():
        return "0 minutes"

    parts: list[str] = []
    if duration.years > 0:
        parts.append(_plural(duration.years, "year"))
    if duration.months > 0:
        parts.append(_plural(duration.months, "month"))
    if duration.days > 0:
        parts.append(_plural(duration.days, "day"))

    if duration.years == 0 and duration.months == 0:
        if duration.hours > 0:
            parts.append(_plural(duration.hours, "hour"))
        if duration.minutes > 0:
            parts.append(_plural(duration.minutes, "minute"))

    if not parts:
        return "0 minutes"
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return " and ".join(parts)
    return f"{', '.join(parts[:-1])}, and {parts[-1]}"

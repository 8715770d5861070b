"""
Cálculo de progresso de barras baseadas em tempo.

Lógica pura de domínio: recebe a barra e um instante de referência e devolve
um ProgressCalculation. Nunca lança exceção para datas bem formadas; spans de
duração zero degradam para percentual e taxa zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from progress_tracker.domain.shared.dates import (
    add_months,
    add_years,
    coerce_instant,
    difference_in_days,
    difference_in_hours,
    difference_in_minutes,
    difference_in_months,
    difference_in_years,
    utcnow,
)
from progress_tracker.domain.shared.value_objects import ZERO_DURATION, Duration
from progress_tracker.domain.systems.bars.date_validator import (
    get_duration_in_days,
    get_elapsed_days,
)
from progress_tracker.domain.systems.bars.entity import ProgressBar, TimeBasedType


@dataclass
class ProgressCalculation:
    current_value: float
    target_value: float
    percentage: float
    elapsed_time: Duration = ZERO_DURATION
    remaining_time: Duration = ZERO_DURATION
    daily_progress_rate: float = 0.0
    estimated_completion_date: Optional[datetime] = None
    is_completed: bool = False
    is_overdue: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_value": self.current_value,
            "target_value": self.target_value,
            "percentage": self.percentage,
            "elapsed_time": self.elapsed_time.to_dict(),
            "remaining_time": self.remaining_time.to_dict(),
            "daily_progress_rate": self.daily_progress_rate,
            "estimated_completion_date": (
                self.estimated_completion_date.isoformat()
                if self.estimated_completion_date else None
            ),
            "is_completed": self.is_completed,
            "is_overdue": self.is_overdue,
        }


def _signed_mod(value: int, modulus: int) -> int:
    # Resto com o sinal do dividendo (o % do Python segue o divisor)
    remainder = abs(value) % modulus
    return remainder if value >= 0 else -remainder


def calculate_duration(start_date: datetime, end_date: datetime) -> Duration:
    """
    Decompõe end_date - start_date em anos/meses/dias/horas/minutos.

    Anos e meses são de calendário; dias, horas e minutos são contados a
    partir da âncora start_date + anos + meses. Os totais vêm direto dos dois
    instantes, sem passar pela decomposição.
    """
    start = coerce_instant(start_date)
    end = coerce_instant(end_date)

    total_days = difference_in_days(end, start)
    total_hours = difference_in_hours(end, start)
    total_minutes = difference_in_minutes(end, start)

    years = difference_in_years(end, start)
    months = _signed_mod(difference_in_months(end, start), 12)

    anchor = add_months(add_years(start, years), months)
    days = difference_in_days(end, anchor)
    hours = _signed_mod(difference_in_hours(end, anchor), 24)
    minutes = _signed_mod(difference_in_minutes(end, anchor), 60)

    return Duration(
        years=abs(years),
        months=abs(months),
        days=abs(days),
        hours=abs(hours),
        minutes=abs(minutes),
        total_days=abs(total_days),
        total_hours=abs(total_hours),
        total_minutes=abs(total_minutes),
    )


def calculate_progress(
    bar: ProgressBar,
    current_date: Optional[datetime] = None,
) -> ProgressCalculation:
    start = coerce_instant(bar.start_date)
    target = coerce_instant(bar.target_date)
    now = coerce_instant(current_date) or utcnow()

    total_days = get_duration_in_days(start, target)
    is_before_start = now < start
    is_after_target = now > target

    elapsed_days = get_elapsed_days(start, now)
    elapsed_time = ZERO_DURATION if is_before_start else calculate_duration(start, now)

    remaining_days = max(0, total_days - elapsed_days)
    if is_after_target:
        remaining_time = ZERO_DURATION
    elif is_before_start:
        # Antes da janela abrir, o "restante" é o span inteiro
        remaining_time = calculate_duration(start, target)
    else:
        remaining_time = calculate_duration(now, target)

    if total_days > 0:
        percentage = min(100.0, max(0.0, elapsed_days / total_days * 100))
        daily_progress_rate = 100 / total_days
    else:
        percentage = 0.0
        daily_progress_rate = 0.0

    # Percentual cheio conta como concluído mesmo antes do horário do alvo
    is_completed = percentage >= 100 or now >= target
    is_overdue = bar.time_based_type == TimeBasedType.ARRIVAL_DATE and is_after_target

    estimated_completion_date = None
    if bar.time_based_type == TimeBasedType.COUNT_UP and not is_completed:
        estimated_completion_date = target

    if bar.time_based_type == TimeBasedType.COUNT_DOWN:
        current_value = remaining_days
    else:
        current_value = elapsed_days

    return ProgressCalculation(
        current_value=current_value,
        target_value=total_days,
        percentage=percentage,
        elapsed_time=elapsed_time,
        remaining_time=remaining_time,
        daily_progress_rate=daily_progress_rate,
        estimated_completion_date=estimated_completion_date,
        is_completed=is_completed,
        is_overdue=is_overdue,
    )

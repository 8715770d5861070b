"""Value Objects do domínio: imutáveis, comparados por valor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Duration:
    """
    Intervalo decorrido/restante em várias granularidades.

    years/months/days/hours/minutes são a decomposição de calendário;
    total_* são as diferenças diretas entre os dois instantes (nunca negativas).
    """
    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    total_days: int = 0
    total_hours: int = 0
    total_minutes: int = 0

    def __post_init__(self):
        for name in (
            "years", "months", "days", "hours", "minutes",
            "total_days", "total_hours", "total_minutes",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"Duration.{name} não pode ser negativo")

    def is_zero(self) -> bool:
        return not (self.years or self.months or self.days or self.hours or self.minutes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "years": self.years,
            "months": self.months,
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "total_days": self.total_days,
            "total_hours": self.total_hours,
            "total_minutes": self.total_minutes,
        }


# Usado sempre que elapsed/remaining precisa ser "clampado" numa fronteira
ZERO_DURATION = Duration()

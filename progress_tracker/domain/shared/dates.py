"""
Aritmética de instantes usada pelo domínio.

Todos os instantes são normalizados para datetime "aware" em UTC.
Diferenças em unidades inteiras truncam em direção a zero (um dia parcial
não conta como dia), e diferenças de calendário usam relativedelta, que
trata anos bissextos e meses de tamanhos diferentes.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

UTC = timezone.utc

DateInput = Union[datetime, date, str, None]

_DAY = timedelta(days=1)
_HOUR = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def coerce_instant(value: Any) -> Optional[datetime]:
    """
    Converte a entrada num instante UTC, ou None se não for uma data válida.

    Aceita datetime (naive é interpretado como UTC), date (meia-noite UTC)
    e strings ISO-8601.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = isoparse(text)
        except (ValueError, OverflowError):
            return None
        return as_utc(parsed)
    return None


def _truncated(delta: timedelta, unit: timedelta) -> int:
    whole = abs(delta) // unit
    return whole if delta >= timedelta(0) else -whole


def difference_in_days(later: datetime, earlier: datetime) -> int:
    return _truncated(later - earlier, _DAY)


def difference_in_hours(later: datetime, earlier: datetime) -> int:
    return _truncated(later - earlier, _HOUR)


def difference_in_minutes(later: datetime, earlier: datetime) -> int:
    return _truncated(later - earlier, _MINUTE)


def difference_in_months(later: datetime, earlier: datetime) -> int:
    delta = relativedelta(later, earlier)
    return delta.years * 12 + delta.months


def difference_in_years(later: datetime, earlier: datetime) -> int:
    return relativedelta(later, earlier).years


def add_years(value: datetime, years: int) -> datetime:
    return value + relativedelta(years=years)


def add_months(value: datetime, months: int) -> datetime:
    return value + relativedelta(months=months)

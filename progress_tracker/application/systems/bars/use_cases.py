"""
Use Cases de barras baseadas em tempo: camada de Aplicação.

Ciclo de vida: validar a configuração, criar a barra com o cálculo inicial,
recalcular o status contra o registro persistido e listar as barras
temporais. O record store é a única fonte da verdade; nada aqui guarda
registros em cache.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from progress_tracker.application.dtos.bar_dtos import (
    BarResult,
    CreateTimeBasedBarCommand,
    DeleteBarCommand,
    GetBarProgressQuery,
    UpdateCompletionStatusCommand,
)
from progress_tracker.application.shared.unit_of_work import UnitOfWork
from progress_tracker.domain.shared.dates import coerce_instant, utcnow
from progress_tracker.domain.systems.bars.calculator import ProgressCalculation, calculate_progress
from progress_tracker.domain.systems.bars.date_validator import (
    DEFAULT_HISTORICAL_LIMIT_YEARS,
    ValidationError,
    ValidationErrorCode,
    ValidationResult,
    validate_date_range,
    validate_future_date,
    validate_historical_date,
    validate_time_scale,
)
from progress_tracker.domain.systems.bars.entity import (
    BarType,
    ProgressBar,
    TimeBasedBarConfig,
    TimeBasedType,
)
from progress_tracker.domain.systems.bars.exceptions import (
    BarNotFoundError,
    BarValidationError,
    NotTimeBasedBarError,
)
from progress_tracker.domain.systems.bars.repository import IProgressBarRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _on_field(result: ValidationResult, field_name: str) -> list[ValidationError]:
    return [replace(e, field=field_name) for e in result.errors]


def validate_bar_config(
    config: TimeBasedBarConfig,
    now: Optional[datetime] = None,
    historical_limit_years: int = DEFAULT_HISTORICAL_LIMIT_YEARS,
) -> ValidationResult:
    """
    Valida uma configuração de barra, acumulando todos os erros.

    Formato inválido em qualquer data interrompe a validação (evita erros em
    cascata a partir de uma data inutilizável); os demais checks são
    independentes e todos rodam.
    """
    now = coerce_instant(now) or utcnow()
    start = coerce_instant(config.start_date)
    target = coerce_instant(config.target_date)

    errors: list[ValidationError] = []
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

    errors.extend(validate_date_range(start, target).errors)
    errors.extend(validate_time_scale(start, target).errors)

    if config.time_based_type == TimeBasedType.COUNT_UP:
        if start > now:
            errors.append(ValidationError(
                "start_date",
                "Count-up bars require a start date in the past",
                ValidationErrorCode.FUTURE_START_DATE,
            ))
        errors.extend(_on_field(
            validate_historical_date(start, historical_limit_years, now=now), "start_date",
        ))
        errors.extend(_on_field(validate_future_date(target, now=now), "target_date"))

    elif config.time_based_type == TimeBasedType.COUNT_DOWN:
        errors.extend(_on_field(validate_future_date(target, now=now), "target_date"))

    # ARRIVAL_DATE: range e escala já cobrem tudo

    return ValidationResult.of(errors)


def calculate_current_progress(bar: ProgressBar, now: Optional[datetime] = None) -> ProgressCalculation:
    """Progresso atual de uma barra temporal; barras manuais são erro de contrato."""
    if not bar.is_time_based():
        raise NotTimeBasedBarError(bar.id)
    return calculate_progress(bar, now or utcnow())


def _to_result(bar: ProgressBar, progress: Optional[ProgressCalculation] = None) -> BarResult:
    return BarResult(
        id=bar.id,
        title=bar.title,
        description=bar.description,
        bar_type=bar.bar_type.value,
        time_based_type=bar.time_based_type.value if bar.time_based_type else None,
        start_date=bar.start_date,
        target_date=bar.target_date,
        current_value=bar.current_value,
        target_value=bar.target_value,
        is_completed=bar.is_completed,
        is_overdue=bar.is_overdue,
        created_at=bar.created_at,
        updated_at=bar.updated_at,
        progress=progress,
    )


class CreateTimeBasedBarUseCase:
    def __init__(
        self,
        repo: IProgressBarRepository,
        uow: UnitOfWork,
        clock: Clock = utcnow,
        historical_limit_years: int = DEFAULT_HISTORICAL_LIMIT_YEARS,
    ) -> None:
        self._repo = repo
        self._uow = uow
        self._clock = clock
        self._historical_limit_years = historical_limit_years

    async def execute(self, cmd: CreateTimeBasedBarCommand) -> BarResult:
        now = self._clock()
        time_based_type = TimeBasedType(cmd.time_based_type)

        start_date = cmd.start_date
        if start_date is None and time_based_type == TimeBasedType.COUNT_DOWN:
            start_date = now

        config = TimeBasedBarConfig(
            title=cmd.title,
            description=cmd.description or None,
            time_based_type=time_based_type,
            start_date=start_date,
            target_date=cmd.target_date,
        )
        validation = validate_bar_config(config, now, self._historical_limit_years)
        if not validation.is_valid:
            raise BarValidationError(validation.errors)

        bar = ProgressBar(
            id=str(uuid.uuid4()),
            title=config.title,
            description=config.description,
            bar_type=BarType.TIME_BASED,
            time_based_type=time_based_type,
            start_date=coerce_instant(config.start_date),
            target_date=coerce_instant(config.target_date),
            created_at=now,
            updated_at=now,
        )
        initial = calculate_progress(bar, now)
        bar.current_value = initial.current_value
        bar.target_value = initial.target_value
        bar.is_completed = initial.is_completed
        bar.is_overdue = initial.is_overdue

        created = await self._repo.create(bar)
        created.record_creation()
        self._uow.collect_events_from(created)
        await self._uow.commit()
        return _to_result(created, initial)


class GetBarProgressUseCase:
    def __init__(self, repo: IProgressBarRepository, clock: Clock = utcnow) -> None:
        self._repo = repo
        self._clock = clock

    async def execute(self, query: GetBarProgressQuery) -> BarResult:
        bar = await self._repo.get_by_id(query.bar_id)
        if not bar:
            raise BarNotFoundError(query.bar_id)
        return _to_result(bar, calculate_current_progress(bar, self._clock()))


class UpdateCompletionStatusUseCase:
    """Persiste is_completed/is_overdue somente quando o status mudou."""

    def __init__(self, repo: IProgressBarRepository, uow: UnitOfWork, clock: Clock = utcnow) -> None:
        self._repo = repo
        self._uow = uow
        self._clock = clock

    async def update_bar(self, bar: ProgressBar) -> ProgressBar:
        now = self._clock()
        progress = calculate_current_progress(bar, now)
        if not bar.status_differs(progress):
            return bar

        changes = bar.apply_calculation(progress, now)
        updated = await self._repo.update(bar.id, changes)
        if updated is None:
            raise BarNotFoundError(bar.id)

        self._uow.collect_events_from(bar)
        await self._uow.commit()
        logger.debug("Status da barra %s persistido: %s", bar.id, changes)
        return updated

    async def execute(self, cmd: UpdateCompletionStatusCommand) -> BarResult:
        bar = await self._repo.get_by_id(cmd.bar_id)
        if not bar:
            raise BarNotFoundError(cmd.bar_id)
        return _to_result(await self.update_bar(bar))


class ListTimeBasedBarsUseCase:
    def __init__(self, repo: IProgressBarRepository, clock: Clock = utcnow) -> None:
        self._repo = repo
        self._clock = clock

    async def fetch(self) -> list[ProgressBar]:
        bars = await self._repo.list_all()
        return [b for b in bars if b.bar_type == BarType.TIME_BASED]

    async def execute(self) -> list[BarResult]:
        now = self._clock()
        return [
            _to_result(bar, calculate_current_progress(bar, now) if bar.is_time_based() else None)
            for bar in await self.fetch()
        ]


class DeleteBarUseCase:
    def __init__(self, repo: IProgressBarRepository, uow: UnitOfWork) -> None:
        self._repo = repo
        self._uow = uow

    async def execute(self, cmd: DeleteBarCommand) -> None:
        bar = await self._repo.get_by_id(cmd.bar_id)
        if not bar:
            raise BarNotFoundError(cmd.bar_id)

        bar.record_deletion()
        self._uow.collect_events_from(bar)
        await self._repo.delete(cmd.bar_id)
        await self._uow.commit()

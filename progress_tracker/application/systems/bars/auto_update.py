"""
Varredura periódica do status das barras.

A cada intervalo carrega todas as barras temporais e persiste is_completed /
is_overdue das que mudaram. Roda como uma task do asyncio criada no lifespan
da aplicação.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncContextManager, Callable, Optional

from progress_tracker.application.shared.unit_of_work import UnitOfWork
from progress_tracker.application.systems.bars.use_cases import (
    Clock,
    ListTimeBasedBarsUseCase,
    UpdateCompletionStatusUseCase,
)
from progress_tracker.domain.shared.dates import utcnow
from progress_tracker.domain.systems.bars.repository import IProgressBarRepository

logger = logging.getLogger(__name__)

StoreFactory = Callable[[], AsyncContextManager[tuple[IProgressBarRepository, UnitOfWork]]]


class AutoUpdateService:
    def __init__(
        self,
        store_factory: StoreFactory,
        interval: float = 60.0,
        clock: Clock = utcnow,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval precisa ser positivo")
        self._store_factory = store_factory
        self._interval = interval
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Uma varredura completa; devolve quantas barras mudaram de status."""
        changed = 0
        async with self._store_factory() as (repo, uow):
            bars = await ListTimeBasedBarsUseCase(repo, self._clock).fetch()
            updater = UpdateCompletionStatusUseCase(repo, uow, self._clock)
            for bar in bars:
                before = (bar.is_completed, bar.is_overdue)
                try:
                    updated = await updater.update_bar(bar)
                except Exception:
                    logger.exception("Falha ao atualizar status da barra %s", bar.id)
                    await uow.rollback()
                    continue
                if (updated.is_completed, updated.is_overdue) != before:
                    changed += 1

        if changed:
            logger.info("Varredura de status: %d barra(s) atualizada(s)", changed)
        return changed

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Erro na varredura de status das barras")
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="bar-status-sweeper")
        logger.info("Varredura de status iniciada (intervalo=%ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Varredura de status encerrada")

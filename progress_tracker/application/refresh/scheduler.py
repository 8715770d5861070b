"""
Schedulers de atualização do progresso exibido.

RefreshScheduler cuida de uma barra; BatchRefreshScheduler mantém um mapa
imutável id -> cálculo para várias barras. Ambos recalculam a cada
`interval` segundos enquanto a página está visível, pausam o timer quando
ela some e voltam com um período cheio (sem cálculo de recuperação).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from progress_tracker.application.refresh.interval import IntervalTimer
from progress_tracker.application.refresh.performance import (
    CalculationCache,
    UpdateCoordinator,
    ViewportVisibilityTracker,
    current_minute,
)
from progress_tracker.application.refresh.visibility import PageVisibility
from progress_tracker.domain.shared.dates import coerce_instant, utcnow
from progress_tracker.domain.systems.bars.calculator import ProgressCalculation, calculate_progress
from progress_tracker.domain.systems.bars.entity import ProgressBar
from progress_tracker.domain.systems.bars.exceptions import NotTimeBasedBarError

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 60.0

Clock = Callable[[], datetime]
UpdateCallback = Callable[[ProgressCalculation], None]
BatchUpdateCallback = Callable[[Mapping[str, ProgressCalculation]], None]


def _timestamp(value) -> float:
    return coerce_instant(value).timestamp()


def bar_dependency_key(bar: ProgressBar) -> tuple:
    """Primitivas que, se mudarem, exigem recálculo imediato."""
    return (
        bar.id,
        _timestamp(bar.start_date),
        _timestamp(bar.target_date),
        bar.time_based_type.value if bar.time_based_type else None,
    )


def _batch_entry_key(bar: ProgressBar) -> tuple:
    return (bar.id, _timestamp(bar.start_date), _timestamp(bar.target_date))


def _validate_interval(interval: float) -> float:
    if interval <= 0:
        raise ValueError("interval precisa ser positivo")
    return float(interval)


# ════════════════════════════════════════════════════════════════
# UMA BARRA
# ════════════════════════════════════════════════════════════════

class RefreshScheduler:
    def __init__(
        self,
        bar: ProgressBar,
        *,
        on_update: Optional[UpdateCallback] = None,
        visibility: Optional[PageVisibility] = None,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Clock = utcnow,
    ) -> None:
        if not bar.is_time_based():
            raise NotTimeBasedBarError(bar.id)
        self._bar = bar
        self._key = bar_dependency_key(bar)
        self._on_update = on_update
        self._visibility = visibility or PageVisibility()
        self._interval = _validate_interval(interval)
        self._clock = clock
        self._progress: Optional[ProgressCalculation] = None
        self._timer = IntervalTimer(self._on_tick, None, loop)
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._started = False
        self._disposed = False

    # ── Estado ──

    @property
    def progress(self) -> Optional[ProgressCalculation]:
        return self._progress

    @property
    def is_stale(self) -> bool:
        return self._progress is None

    @property
    def is_running(self) -> bool:
        return self._timer.is_running

    @property
    def interval(self) -> float:
        return self._interval

    # ── Ciclo de vida ──

    def start(self) -> "RefreshScheduler":
        if self._started or self._disposed:
            return self
        self._started = True
        self._unsubscribe = self._visibility.subscribe(self._on_visibility_change)
        self._recompute()
        self._sync_timer()
        return self

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._timer.dispose()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        logger.debug("Scheduler da barra %s descartado", self._bar.id)

    def __enter__(self) -> "RefreshScheduler":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    # ── Operações ──

    def refresh(self) -> ProgressCalculation:
        """Recalcula agora, sem mexer no timer."""
        return self._recompute()

    def set_bar(self, bar: ProgressBar) -> None:
        if not bar.is_time_based():
            raise NotTimeBasedBarError(bar.id)
        self._bar = bar
        key = bar_dependency_key(bar)
        if key == self._key:
            return
        self._key = key
        if self._started and not self._disposed:
            self._recompute()

    def set_interval(self, interval: float) -> None:
        self._interval = _validate_interval(interval)
        self._sync_timer()

    def set_on_update(self, on_update: Optional[UpdateCallback]) -> None:
        self._on_update = on_update

    # ── Internos ──

    def _recompute(self) -> ProgressCalculation:
        progress = calculate_progress(self._bar, self._clock())
        self._progress = progress
        if self._disposed or self._on_update is None:
            return progress
        try:
            self._on_update(progress)
        except Exception:
            logger.exception("Erro no callback de atualização da barra %s", self._bar.id)
        return progress

    def _on_tick(self) -> None:
        if not self._disposed:
            self._recompute()

    def _on_visibility_change(self, visible: bool) -> None:
        # Ao voltar: período cheio, sem recálculo imediato
        self._timer.set_delay(None)
        self._sync_timer()

    def _sync_timer(self) -> None:
        active = self._started and not self._disposed and self._visibility.is_visible
        self._timer.set_delay(self._interval if active else None)


# ════════════════════════════════════════════════════════════════
# LOTE DE BARRAS
# ════════════════════════════════════════════════════════════════

class BatchRefreshScheduler:
    """
    Atualiza várias barras com um único timer.

    O mapa publicado é imutável e substituído por inteiro a cada tick, então
    quem o lê nunca vê um estado parcial. Opcionalmente usa um cache por
    minuto, um rastreador de viewport (barras fora da tela mantêm o último
    valor) e um coordenador de lotes para publicar o resultado.
    """

    def __init__(
        self,
        bars: Iterable[ProgressBar] = (),
        *,
        on_update: Optional[BatchUpdateCallback] = None,
        visibility: Optional[PageVisibility] = None,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Clock = utcnow,
        cache: Optional[CalculationCache] = None,
        tracker: Optional[ViewportVisibilityTracker] = None,
        coordinator: Optional[UpdateCoordinator] = None,
    ) -> None:
        self._bars = self._time_based_only(bars)
        self._key = tuple(_batch_entry_key(b) for b in self._bars)
        self._on_update = on_update
        self._visibility = visibility or PageVisibility()
        self._interval = _validate_interval(interval)
        self._clock = clock
        self._cache = cache
        self._tracker = tracker
        self._coordinator = coordinator
        self._progress_map: Mapping[str, ProgressCalculation] = MappingProxyType({})
        self._is_hydrated = False
        self._timer = IntervalTimer(self._on_tick, None, loop)
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._started = False
        self._disposed = False

    @staticmethod
    def _time_based_only(bars: Iterable[ProgressBar]) -> tuple[ProgressBar, ...]:
        selected = []
        for bar in bars:
            if bar.is_time_based():
                selected.append(bar)
            else:
                logger.debug("Barra %s ignorada: não é baseada em tempo", bar.id)
        return tuple(selected)

    # ── Estado ──

    @property
    def progress_map(self) -> Mapping[str, ProgressCalculation]:
        return self._progress_map

    @property
    def is_hydrated(self) -> bool:
        return self._is_hydrated

    @property
    def is_running(self) -> bool:
        return self._timer.is_running

    @property
    def bars(self) -> tuple[ProgressBar, ...]:
        return self._bars

    def get(self, bar_id: str) -> Optional[ProgressCalculation]:
        return self._progress_map.get(bar_id)

    # ── Ciclo de vida ──

    def start(self) -> "BatchRefreshScheduler":
        if self._started or self._disposed:
            return self
        self._started = True
        self._unsubscribe = self._visibility.subscribe(self._on_visibility_change)
        self._recompute_all()
        self._sync_timer()
        return self

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._timer.dispose()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "BatchRefreshScheduler":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    # ── Operações ──

    def refresh_all(self) -> Mapping[str, ProgressCalculation]:
        return self._recompute_all()

    def set_bars(self, bars: Iterable[ProgressBar]) -> None:
        new_bars = self._time_based_only(bars)
        new_key = tuple(_batch_entry_key(b) for b in new_bars)
        self._bars = new_bars
        if new_key == self._key:
            return

        if self._cache is not None:
            old_entries = {entry[0]: entry for entry in self._key}
            new_entries = {entry[0]: entry for entry in new_key}
            for bar_id, entry in old_entries.items():
                if new_entries.get(bar_id) != entry:
                    self._cache.invalidate(bar_id)

        self._key = new_key
        if self._started and not self._disposed:
            self._recompute_all()
            self._sync_timer()

    def set_interval(self, interval: float) -> None:
        self._interval = _validate_interval(interval)
        self._sync_timer()

    def set_on_update(self, on_update: Optional[BatchUpdateCallback]) -> None:
        self._on_update = on_update

    # ── Internos ──

    def _recompute_all(self) -> Mapping[str, ProgressCalculation]:
        if not self._bars:
            self._progress_map = MappingProxyType({})
            self._is_hydrated = True
            self._publish()
            return self._progress_map

        now = self._clock()
        minute = current_minute(now)
        previous = self._progress_map
        fresh: dict[str, ProgressCalculation] = {}

        for bar in self._bars:
            if self._tracker is not None and not self._tracker.is_visible(bar.id) and bar.id in previous:
                fresh[bar.id] = previous[bar.id]
                continue
            if self._cache is not None:
                cached = self._cache.get(bar.id, minute)
                if cached is not None:
                    fresh[bar.id] = cached
                    continue
            calculation = calculate_progress(bar, now)
            if self._cache is not None:
                self._cache.set(bar.id, minute, calculation)
            fresh[bar.id] = calculation

        self._progress_map = MappingProxyType(fresh)
        self._is_hydrated = True
        self._publish()
        return self._progress_map

    def _publish(self) -> None:
        if self._disposed:
            return
        if self._coordinator is not None:
            self._coordinator.batch_update(self._progress_map)
        if self._on_update is None:
            return
        try:
            self._on_update(self._progress_map)
        except Exception:
            logger.exception("Erro no callback de atualização em lote")

    def _on_tick(self) -> None:
        if not self._disposed:
            self._recompute_all()

    def _on_visibility_change(self, visible: bool) -> None:
        self._timer.set_delay(None)
        self._sync_timer()

    def _sync_timer(self) -> None:
        active = (
            self._started
            and not self._disposed
            and bool(self._bars)
            and self._visibility.is_visible
        )
        self._timer.set_delay(self._interval if active else None)

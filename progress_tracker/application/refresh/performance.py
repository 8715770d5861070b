"""
Camada opcional de desempenho para a atualização das barras.

- CalculationCache: memoiza cálculos por barra dentro do mesmo minuto;
- ViewportVisibilityTracker: quais barras estão visíveis na tela;
- UpdateCoordinator: junta atualizações e entrega tudo de uma vez na próxima
  volta do event loop.

Tudo roda numa única thread; as coleções expostas são sempre substituídas,
nunca alteradas no lugar.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

from progress_tracker.domain.shared.dates import coerce_instant, utcnow
from progress_tracker.domain.systems.bars.calculator import ProgressCalculation

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 1000


def current_minute(at: Optional[datetime] = None) -> int:
    """Instante truncado para minutos inteiros (chave de coerência do cache)."""
    instant = coerce_instant(at) or utcnow()
    return int(instant.timestamp() // 60)


# ════════════════════════════════════════════════════════════════
# CACHE
# ════════════════════════════════════════════════════════════════

class CalculationCache:
    """
    Cache por barra válido apenas para o minuto em que foi calculado.

    Ao atingir a capacidade remove a entrada mais antiga por ordem de
    inserção (não é LRU). Entradas e saídas são cópias.
    """

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        if max_size < 1:
            raise ValueError("max_size precisa ser >= 1")
        self._max_size = max_size
        self._entries: dict[str, tuple[int, ProgressCalculation]] = {}

    def get(self, bar_id: str, minute: int) -> Optional[ProgressCalculation]:
        cached = self._entries.get(bar_id)
        if cached is None:
            return None
        cached_minute, calculation = cached
        if cached_minute != minute:
            del self._entries[bar_id]
            return None
        return replace(calculation)

    def set(self, bar_id: str, minute: int, calculation: ProgressCalculation) -> None:
        if bar_id not in self._entries and len(self._entries) >= self._max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[bar_id] = (minute, replace(calculation))

    def invalidate(self, bar_id: str) -> None:
        self._entries.pop(bar_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, bar_id: object) -> bool:
        return bar_id in self._entries


# ════════════════════════════════════════════════════════════════
# VISIBILIDADE NO VIEWPORT
# ════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IntersectionEntry:
    bar_id: str
    is_intersecting: bool


class IntersectionObserver(Protocol):
    """Primitiva de interseção com o viewport (fornecida pelo host)."""

    def observe(self, bar_id: str, target: Any) -> None: ...

    def unobserve(self, bar_id: str, target: Any) -> None: ...

    def disconnect(self) -> None: ...


EntriesCallback = Callable[[Iterable[IntersectionEntry]], None]
ObserverFactory = Callable[[EntriesCallback], IntersectionObserver]
VisibilityCallback = Callable[[str, bool], None]


class ViewportVisibilityTracker:
    """
    Rastreia quais barras estão visíveis.

    Sem primitiva de interseção, toda barra observada é considerada visível.
    """

    def __init__(self, observer_factory: Optional[ObserverFactory] = None) -> None:
        self._observer: Optional[IntersectionObserver] = (
            observer_factory(self._handle_entries) if observer_factory else None
        )
        self._visible: frozenset[str] = frozenset()
        self._targets: dict[str, Any] = {}
        self._callbacks: tuple[VisibilityCallback, ...] = ()

    @property
    def has_observer(self) -> bool:
        return self._observer is not None

    def observe(self, bar_id: str, target: Any = None) -> None:
        if self._observer is None:
            self._visible = self._visible | {bar_id}
            return
        self._targets[bar_id] = target
        self._observer.observe(bar_id, target)

    def unobserve(self, bar_id: str) -> None:
        target = self._targets.pop(bar_id, None)
        if self._observer is not None and target is not None:
            self._observer.unobserve(bar_id, target)
        self._visible = self._visible - {bar_id}

    @property
    def visible_bars(self) -> frozenset[str]:
        return self._visible

    def is_visible(self, bar_id: str) -> bool:
        if self._observer is None:
            return True
        return bar_id in self._visible

    def on_visibility_change(self, callback: VisibilityCallback) -> Callable[[], None]:
        self._callbacks = (*self._callbacks, callback)

        def unsubscribe() -> None:
            self._callbacks = tuple(c for c in self._callbacks if c is not callback)

        return unsubscribe

    def _handle_entries(self, entries: Iterable[IntersectionEntry]) -> None:
        for entry in entries:
            if entry.is_intersecting:
                self._visible = self._visible | {entry.bar_id}
            else:
                self._visible = self._visible - {entry.bar_id}
            for callback in self._callbacks:
                try:
                    callback(entry.bar_id, entry.is_intersecting)
                except Exception:
                    logger.exception("Erro em callback de visibilidade da barra %s", entry.bar_id)

    def cleanup(self) -> None:
        if self._observer is not None:
            self._observer.disconnect()
            self._observer = None
        self._visible = frozenset()
        self._targets = {}
        self._callbacks = ()


# ════════════════════════════════════════════════════════════════
# COORDENADOR DE LOTES
# ════════════════════════════════════════════════════════════════

BatchListener = Callable[[Mapping[str, ProgressCalculation]], None]


class UpdateCoordinator:
    """
    Junta atualizações por barra (última escrita vence) e entrega o lote
    inteiro, uma vez por listener, na próxima volta do event loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._pending: dict[str, ProgressCalculation] = {}
        self._handle: Optional[asyncio.Handle] = None
        self._listeners: tuple[BatchListener, ...] = ()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def flush_scheduled(self) -> bool:
        return self._handle is not None

    def batch_update(self, updates: Mapping[str, ProgressCalculation]) -> None:
        self._pending = {**self._pending, **updates}
        self._schedule_flush()

    def schedule_update(self, bar_id: str, progress: ProgressCalculation) -> None:
        self._pending = {**self._pending, bar_id: progress}
        self._schedule_flush()

    def on_batch_update(self, listener: BatchListener) -> Callable[[], None]:
        self._listeners = (*self._listeners, listener)

        def unsubscribe() -> None:
            self._listeners = tuple(l for l in self._listeners if l is not listener)

        return unsubscribe

    def flush_updates(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if not self._pending:
            return

        updates = MappingProxyType(self._pending)
        self._pending = {}
        for listener in self._listeners:
            try:
                listener(updates)
            except Exception:
                logger.exception("Erro em listener de lote de atualizações")

    def cleanup(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = {}
        self._listeners = ()

    def _schedule_flush(self) -> None:
        if self._handle is None:
            if self._loop is None:
                self._loop = asyncio.get_running_loop()
            self._handle = self._loop.call_soon(self.flush_updates)

"""Factories dos schedulers de atualização configurados a partir de Settings."""

from __future__ import annotations

from typing import Iterable, Optional

from progress_tracker.application.refresh.performance import (
    CalculationCache,
    UpdateCoordinator,
    ViewportVisibilityTracker,
)
from progress_tracker.application.refresh.scheduler import BatchRefreshScheduler, RefreshScheduler
from progress_tracker.domain.systems.bars.entity import ProgressBar
from progress_tracker.infrastructure.config import Settings, get_settings


def build_scheduler(bar: ProgressBar, settings: Optional[Settings] = None, **kwargs) -> RefreshScheduler:
    settings = settings or get_settings()
    kwargs.setdefault("interval", settings.REFRESH_INTERVAL_SECONDS)
    return RefreshScheduler(bar, **kwargs)


def build_batch_scheduler(
    bars: Iterable[ProgressBar] = (),
    settings: Optional[Settings] = None,
    *,
    tracker: Optional[ViewportVisibilityTracker] = None,
    coordinator: Optional[UpdateCoordinator] = None,
    **kwargs,
) -> BatchRefreshScheduler:
    """Scheduler em lote com cache dimensionado por CALCULATION_CACHE_SIZE."""
    settings = settings or get_settings()
    kwargs.setdefault("interval", settings.REFRESH_INTERVAL_SECONDS)
    kwargs.setdefault("cache", CalculationCache(settings.CALCULATION_CACHE_SIZE))
    return BatchRefreshScheduler(bars, tracker=tracker, coordinator=coordinator, **kwargs)

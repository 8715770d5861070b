"""Testes dos schedulers de atualização: timer, visibilidade, descarte e lote."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from progress_tracker.application.refresh.interval import IntervalTimer
from progress_tracker.application.refresh.performance import (
    CalculationCache,
    IntersectionEntry,
    UpdateCoordinator,
    ViewportVisibilityTracker,
)
from progress_tracker.application.refresh.scheduler import BatchRefreshScheduler, RefreshScheduler
from progress_tracker.application.refresh.visibility import PageVisibility
from progress_tracker.domain.systems.bars.entity import BarType, ProgressBar, TimeBasedType
from progress_tracker.domain.systems.bars.exceptions import NotTimeBasedBarError
from progress_tracker.infrastructure.config import Settings
from progress_tracker.infrastructure.refresh import build_batch_scheduler, build_scheduler
from tests.conftest import make_bar

UTC = timezone.utc


# ════════════════════════════════════════════════════════════════
# INTERVAL TIMER
# ════════════════════════════════════════════════════════════════

def test_interval_timer_ticks_and_pauses(fake_loop):
    calls = []
    timer = IntervalTimer(lambda: calls.append(fake_loop.time()), 10, loop=fake_loop)

    fake_loop.advance(25)
    assert calls == [10, 20]

    timer.set_delay(None)
    fake_loop.advance(100)
    assert len(calls) == 2
    assert not timer.is_running


def test_interval_timer_uses_latest_callback_without_restart(fake_loop):
    calls = []
    timer = IntervalTimer(lambda: calls.append("old"), 10, loop=fake_loop)
    fake_loop.advance(5)
    timer.set_callback(lambda: calls.append("new"))
    fake_loop.advance(5)
    assert calls == ["new"]


def test_interval_timer_restarts_on_delay_change(fake_loop):
    calls = []
    timer = IntervalTimer(lambda: calls.append(fake_loop.time()), 10, loop=fake_loop)
    fake_loop.advance(8)
    timer.set_delay(20)
    fake_loop.advance(19)
    assert calls == []
    fake_loop.advance(1)
    assert calls == [28]


def test_interval_timer_survives_callback_errors(fake_loop):
    calls = []

    def boom():
        calls.append(1)
        raise RuntimeError("falhou")

    IntervalTimer(boom, 5, loop=fake_loop)
    fake_loop.advance(15)
    assert len(calls) == 3


def test_interval_timer_rejects_non_positive_delay(fake_loop):
    with pytest.raises(ValueError):
        IntervalTimer(lambda: None, 0, loop=fake_loop)


# ════════════════════════════════════════════════════════════════
# UMA BARRA
# ════════════════════════════════════════════════════════════════

def _scheduler(fake_loop, loop_clock, **kwargs):
    bar = kwargs.pop("bar", make_bar(start=datetime(2023, 12, 1, tzinfo=UTC), target=datetime(2024, 2, 1, tzinfo=UTC)))
    return RefreshScheduler(bar, loop=fake_loop, clock=loop_clock, **kwargs)


def test_scheduler_computes_on_start_and_every_interval(fake_loop, loop_clock):
    updates = []
    scheduler = _scheduler(fake_loop, loop_clock, on_update=updates.append)
    assert scheduler.is_stale

    scheduler.start()
    assert not scheduler.is_stale
    assert len(updates) == 1

    fake_loop.advance(180)
    assert len(updates) == 4
    assert scheduler.progress is updates[-1]


def test_scheduler_rejects_manual_bar(fake_loop, loop_clock):
    manual = ProgressBar(id="m", title="manual", bar_type=BarType.MANUAL)
    with pytest.raises(NotTimeBasedBarError):
        RefreshScheduler(manual, loop=fake_loop, clock=loop_clock)


def test_scheduler_dispose_stops_all_callbacks(fake_loop, loop_clock):
    updates = []
    visibility = PageVisibility()
    scheduler = _scheduler(fake_loop, loop_clock, on_update=updates.append, visibility=visibility)
    scheduler.start()
    scheduler.dispose()

    fake_loop.advance(600)
    visibility.set_visible(False)
    visibility.set_visible(True)
    fake_loop.advance(600)

    assert len(updates) == 1
    assert visibility.listener_count == 0
    assert fake_loop.pending_timers == 0


def test_scheduler_refresh_after_dispose_does_not_notify(fake_loop, loop_clock):
    updates = []
    scheduler = _scheduler(fake_loop, loop_clock, on_update=updates.append).start()
    scheduler.dispose()
    assert scheduler.refresh() is not None
    assert len(updates) == 1


def test_scheduler_pauses_while_hidden_and_resumes_with_full_period(fake_loop, loop_clock):
    updates = []
    visibility = PageVisibility()
    scheduler = _scheduler(fake_loop, loop_clock, on_update=updates.append, visibility=visibility)
    scheduler.start()

    fake_loop.advance(30)
    visibility.set_visible(False)
    fake_loop.advance(600)
    assert len(updates) == 1

    visibility.set_visible(True)
    assert len(updates) == 1
    fake_loop.advance(59)
    assert len(updates) == 1
    fake_loop.advance(1)
    assert len(updates) == 2


def test_scheduler_latest_callback_wins(fake_loop, loop_clock):
    first, second = [], []
    scheduler = _scheduler(fake_loop, loop_clock, on_update=first.append).start()
    scheduler.set_on_update(second.append)
    fake_loop.advance(60)
    assert len(first) == 1
    assert len(second) == 1


def test_scheduler_set_interval_restarts_period(fake_loop, loop_clock):
    updates = []
    scheduler = _scheduler(fake_loop, loop_clock, on_update=updates.append).start()
    fake_loop.advance(50)
    scheduler.set_interval(30)
    fake_loop.advance(29)
    assert len(updates) == 1
    fake_loop.advance(1)
    assert len(updates) == 2


def test_scheduler_set_bar_recomputes_only_when_key_changes(fake_loop, loop_clock):
    updates = []
    bar = make_bar(start=datetime(2023, 12, 1, tzinfo=UTC), target=datetime(2024, 2, 1, tzinfo=UTC))
    scheduler = _scheduler(fake_loop, loop_clock, bar=bar, on_update=updates.append).start()

    scheduler.set_bar(replace(bar, title="Outro título"))
    assert len(updates) == 1

    scheduler.set_bar(replace(bar, target_date=datetime(2024, 3, 1, tzinfo=UTC)))
    assert len(updates) == 2
    assert updates[-1].target_value == 91


def test_scheduler_callback_errors_are_contained(fake_loop, loop_clock):
    def boom(_):
        raise RuntimeError("falhou")

    scheduler = _scheduler(fake_loop, loop_clock, on_update=boom).start()
    fake_loop.advance(120)
    assert scheduler.progress is not None
    assert scheduler.is_running


def test_scheduler_context_manager(fake_loop, loop_clock):
    with _scheduler(fake_loop, loop_clock) as scheduler:
        assert scheduler.is_running
    assert not scheduler.is_running


# ════════════════════════════════════════════════════════════════
# LOTE
# ════════════════════════════════════════════════════════════════

def _bars():
    return [
        make_bar(bar_id="a", start=datetime(2023, 12, 1, tzinfo=UTC), target=datetime(2024, 2, 1, tzinfo=UTC)),
        make_bar(TimeBasedType.COUNT_DOWN, bar_id="b",
                 start=datetime(2023, 12, 1, tzinfo=UTC), target=datetime(2024, 1, 11, tzinfo=UTC)),
    ]


def test_batch_replaces_map_atomically(fake_loop, loop_clock):
    snapshots = []
    scheduler = BatchRefreshScheduler(
        _bars(), on_update=snapshots.append, loop=fake_loop, clock=loop_clock,
    )
    assert not scheduler.is_hydrated
    scheduler.start()
    assert scheduler.is_hydrated

    first = scheduler.progress_map
    assert set(first) == {"a", "b"}
    assert scheduler.get("b").current_value == 10

    fake_loop.advance(60)
    assert scheduler.progress_map is not first
    assert set(first) == {"a", "b"}
    with pytest.raises(TypeError):
        scheduler.progress_map["c"] = None
    assert len(snapshots) == 2


def test_batch_empty_list_hydrates_and_pauses(fake_loop, loop_clock):
    scheduler = BatchRefreshScheduler([], loop=fake_loop, clock=loop_clock).start()
    assert scheduler.is_hydrated
    assert dict(scheduler.progress_map) == {}
    assert not scheduler.is_running

    scheduler.set_bars(_bars())
    assert scheduler.is_running
    assert set(scheduler.progress_map) == {"a", "b"}

    scheduler.set_bars([])
    assert dict(scheduler.progress_map) == {}
    assert not scheduler.is_running


def test_batch_skips_manual_bars(fake_loop, loop_clock):
    manual = ProgressBar(id="m", title="manual", bar_type=BarType.MANUAL)
    scheduler = BatchRefreshScheduler([manual, *_bars()], loop=fake_loop, clock=loop_clock).start()
    assert set(scheduler.progress_map) == {"a", "b"}


def test_batch_dispose(fake_loop, loop_clock):
    snapshots = []
    visibility = PageVisibility()
    scheduler = BatchRefreshScheduler(
        _bars(), on_update=snapshots.append, visibility=visibility, loop=fake_loop, clock=loop_clock,
    ).start()
    scheduler.dispose()
    fake_loop.advance(600)
    assert len(snapshots) == 1
    assert visibility.listener_count == 0


def test_batch_uses_cache_and_invalidates_changed_bars(fake_loop, loop_clock):
    cache = CalculationCache()
    bars = _bars()
    scheduler = BatchRefreshScheduler(bars, loop=fake_loop, clock=loop_clock, cache=cache).start()
    assert len(cache) == 2

    first_a = scheduler.get("a")
    scheduler.refresh_all()
    assert scheduler.get("a") == first_a
    assert scheduler.get("a") is not first_a

    moved = replace(bars[0], target_date=datetime(2024, 3, 1, tzinfo=UTC))
    scheduler.set_bars([moved, bars[1]])
    assert scheduler.get("a").target_value == 91


def test_batch_hidden_bars_keep_previous_value(fake_loop, loop_clock):
    observers = []

    class Observer:
        def __init__(self, callback):
            self.callback = callback
            observers.append(self)

        def observe(self, bar_id, target):
            pass

        def unobserve(self, bar_id, target):
            pass

        def disconnect(self):
            pass

    tracker = ViewportVisibilityTracker(Observer)
    observers[0].callback([IntersectionEntry("a", True)])

    scheduler = BatchRefreshScheduler(_bars(), loop=fake_loop, clock=loop_clock, tracker=tracker).start()
    hidden_before = scheduler.get("b")
    visible_before = scheduler.get("a")

    fake_loop.advance(86400)
    assert scheduler.get("b") is hidden_before
    assert scheduler.get("a") is not visible_before


def test_batch_publishes_through_coordinator(fake_loop, loop_clock):
    coordinator = UpdateCoordinator(loop=fake_loop)
    batches = []
    coordinator.on_batch_update(batches.append)

    BatchRefreshScheduler(_bars(), loop=fake_loop, clock=loop_clock, coordinator=coordinator).start()
    assert batches == []
    fake_loop.run_ready()
    assert len(batches) == 1
    assert set(batches[0]) == {"a", "b"}


# ════════════════════════════════════════════════════════════════
# FACTORIES (Settings)
# ════════════════════════════════════════════════════════════════

def test_factories_read_interval_and_cache_size(fake_loop, loop_clock):
    settings = Settings(REFRESH_INTERVAL_SECONDS=15, CALCULATION_CACHE_SIZE=1)

    single = build_scheduler(_bars()[0], settings, loop=fake_loop, clock=loop_clock)
    assert single.interval == 15

    updates = []
    batch = build_batch_scheduler(
        _bars(), settings, on_update=updates.append, loop=fake_loop, clock=loop_clock,
    ).start()
    fake_loop.advance(15)
    assert len(updates) == 2
    assert len(batch.progress_map) == 2

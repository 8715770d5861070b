"""
Fixtures de teste: client HTTP, banco SQLite e um event loop falso.

Usa SQLite async para testes rápidos sem Docker. O FakeLoop controla o tempo
dos timers (call_later/call_soon) sem dormir de verdade.
"""

import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from progress_tracker.domain.systems.bars.entity import BarType, ProgressBar, TimeBasedType
from progress_tracker.infrastructure.database.session import Base, get_db
from progress_tracker.main import app
from progress_tracker.presentation.api.v1.deps import get_clock

# ── SQLite async para testes ──
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)

# Relógio fixo das rotas HTTP
FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Cria/destrói tabelas antes/depois de cada teste."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionLocal() as s:
        yield s


# ════════════════════════════════════════════════════════════════
# EVENT LOOP FALSO
# ════════════════════════════════════════════════════════════════

class FakeHandle:
    def __init__(self, when: float, callback, args) -> None:
        self.when = when
        self._callback = callback
        self._args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        if not self.cancelled:
            self._callback(*self._args)


class FakeLoop:
    """Subconjunto de asyncio.AbstractEventLoop usado pelos timers."""

    def __init__(self) -> None:
        self._now = 0.0
        self._timers: list = []
        self._ready: list[FakeHandle] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay, callback, *args) -> FakeHandle:
        handle = FakeHandle(self._now + delay, callback, args)
        heapq.heappush(self._timers, (handle.when, next(self._seq), handle))
        return handle

    def call_soon(self, callback, *args) -> FakeHandle:
        handle = FakeHandle(self._now, callback, args)
        self._ready.append(handle)
        return handle

    def run_ready(self) -> None:
        ready, self._ready = self._ready, []
        for handle in ready:
            handle.run()

    def advance(self, seconds: float) -> None:
        """Avança o relógio disparando os timers vencidos em ordem."""
        target = self._now + seconds
        while self._timers and self._timers[0][0] <= target:
            when, _, handle = heapq.heappop(self._timers)
            self._now = when
            handle.run()
            self.run_ready()
        self._now = target

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, h in self._timers if not h.cancelled)


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def loop_clock(fake_loop: FakeLoop):
    """Relógio de parede acoplado ao tempo do FakeLoop."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return lambda: base + timedelta(seconds=fake_loop.time())


def make_bar(
    time_based_type: TimeBasedType = TimeBasedType.COUNT_UP,
    start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc),
    target: datetime = datetime(2024, 12, 31, tzinfo=timezone.utc),
    bar_id: str = "bar-1",
    **kwargs,
) -> ProgressBar:
    return ProgressBar(
        id=bar_id,
        title=kwargs.pop("title", "Barra de teste"),
        bar_type=BarType.TIME_BASED,
        time_based_type=time_based_type,
        start_date=start,
        target_date=target,
        **kwargs,
    )

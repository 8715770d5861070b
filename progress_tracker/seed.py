"""
Seed script: cria algumas barras de demonstração.

Uso:
    python -m progress_tracker.seed

Idempotente: barras com o mesmo título não são recriadas.
"""

import asyncio
from datetime import timedelta

from progress_tracker.application.dtos.bar_dtos import CreateTimeBasedBarCommand
from progress_tracker.application.systems.bars.use_cases import (
    CreateTimeBasedBarUseCase,
    ListTimeBasedBarsUseCase,
)
from progress_tracker.domain.shared.dates import utcnow
from progress_tracker.domain.systems.bars.exceptions import BarValidationError
from progress_tracker.infrastructure.config import get_settings
from progress_tracker.infrastructure.systems.bars.repository import open_bar_store

settings = get_settings()


def demo_commands(now=None) -> list[CreateTimeBasedBarCommand]:
    now = now or utcnow()
    return [
        CreateTimeBasedBarCommand(
            title="Dias sem fumar",
            time_based_type="count-up",
            start_date=now - timedelta(days=45),
            target_date=now + timedelta(days=320),
            description="Meta: um ano inteiro",
        ),
        CreateTimeBasedBarCommand(
            title="Férias",
            time_based_type="count-down",
            target_date=now + timedelta(days=90),
        ),
        CreateTimeBasedBarCommand(
            title="Entrega do relatório",
            time_based_type="arrival-date",
            start_date=now - timedelta(days=10),
            target_date=now + timedelta(days=5),
        ),
    ]


async def seed() -> None:
    async with open_bar_store() as (repo, uow):
        existing = {bar.title for bar in await ListTimeBasedBarsUseCase(repo).fetch()}
        uc = CreateTimeBasedBarUseCase(repo, uow, historical_limit_years=settings.HISTORICAL_LIMIT_YEARS)

        for cmd in demo_commands():
            if cmd.title in existing:
                print(f"ℹ️  Barra '{cmd.title}' já existe. Ignorada.")
                continue
            try:
                created = await uc.execute(cmd)
            except BarValidationError as exc:
                print(f"❌ '{cmd.title}' rejeitada: {exc}")
                continue
            print(f"✅ Barra criada: {created.title} ({created.time_based_type}) id={created.id}")


def main():
    asyncio.run(seed())


if __name__ == "__main__":
    main()

"""
Endpoints de barras temporais: /api/v1/bars

Criação validada, leitura com progresso calculado na hora, persistência do
status derivado e remoção.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from progress_tracker.application.dtos.bar_dtos import (
    CreateTimeBasedBarCommand,
    DeleteBarCommand,
    GetBarProgressQuery,
    UpdateCompletionStatusCommand,
)
from progress_tracker.application.shared.unit_of_work import UnitOfWork
from progress_tracker.application.systems.bars.use_cases import (
    Clock,
    CreateTimeBasedBarUseCase,
    DeleteBarUseCase,
    GetBarProgressUseCase,
    ListTimeBasedBarsUseCase,
    UpdateCompletionStatusUseCase,
)
from progress_tracker.infrastructure.systems.bars.repository import ProgressBarRepository
from progress_tracker.presentation.api.v1.deps import (
    get_bar_repo,
    get_clock,
    get_historical_limit_years,
    get_uow,
)
from progress_tracker.presentation.api.v1.schemas import BarCreate, BarOut, ErrorResponse

router = APIRouter()


@router.post(
    "/",
    response_model=BarOut,
    status_code=status.HTTP_201_CREATED,
    summary="Criar barra baseada em tempo",
    responses={422: {"model": ErrorResponse, "description": "Datas inválidas"}},
)
async def create_bar(
    payload: BarCreate,
    repo: ProgressBarRepository = Depends(get_bar_repo),
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
    historical_limit_years: int = Depends(get_historical_limit_years),
):
    uc = CreateTimeBasedBarUseCase(repo, uow, clock, historical_limit_years)
    result = await uc.execute(CreateTimeBasedBarCommand(
        title=payload.title,
        description=payload.description,
        time_based_type=payload.time_based_type.value,
        start_date=payload.start_date,
        target_date=payload.target_date,
    ))
    return BarOut.from_result(result)


@router.get(
    "/",
    response_model=list[BarOut],
    summary="Listar barras baseadas em tempo",
    description="Cada item traz o progresso recalculado no instante da requisição.",
)
async def list_bars(
    repo: ProgressBarRepository = Depends(get_bar_repo),
    clock: Clock = Depends(get_clock),
):
    results = await ListTimeBasedBarsUseCase(repo, clock).execute()
    return [BarOut.from_result(r) for r in results]


@router.get(
    "/{bar_id}",
    response_model=BarOut,
    summary="Detalhar barra com progresso atual",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def get_bar(
    bar_id: str,
    repo: ProgressBarRepository = Depends(get_bar_repo),
    clock: Clock = Depends(get_clock),
):
    result = await GetBarProgressUseCase(repo, clock).execute(GetBarProgressQuery(bar_id=bar_id))
    return BarOut.from_result(result)


@router.post(
    "/{bar_id}/status",
    response_model=BarOut,
    summary="Recalcular e persistir o status",
    description="Grava is_completed/is_overdue apenas quando o status calculado mudou.",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_bar_status(
    bar_id: str,
    repo: ProgressBarRepository = Depends(get_bar_repo),
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
):
    uc = UpdateCompletionStatusUseCase(repo, uow, clock)
    result = await uc.execute(UpdateCompletionStatusCommand(bar_id=bar_id))
    return BarOut.from_result(result)


@router.delete(
    "/{bar_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remover barra",
    responses={404: {"model": ErrorResponse}},
)
async def delete_bar(
    bar_id: str,
    repo: ProgressBarRepository = Depends(get_bar_repo),
    uow: UnitOfWork = Depends(get_uow),
):
    await DeleteBarUseCase(repo, uow).execute(DeleteBarCommand(bar_id=bar_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

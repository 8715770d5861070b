"""Router API v1: agrega os sub-routers."""

from fastapi import APIRouter

from progress_tracker.presentation.api.v1.endpoints.bars import router as bars_router

api_v1_router = APIRouter()

api_v1_router.include_router(bars_router, prefix="/bars", tags=["⏳ Barras de progresso"])

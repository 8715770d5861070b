"""
Ponto de entrada principal da aplicação FastAPI.

    uvicorn progress_tracker.main:app --reload --port 8000

Inclui: middleware (CORS, Request ID, log de acesso), exception handlers
globais, varredura periódica de status e health check com ping ao banco.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from progress_tracker.application.shared.event_dispatcher import dispatcher
from progress_tracker.application.shared.event_handlers import register_all_handlers
from progress_tracker.application.systems.bars.auto_update import AutoUpdateService
from progress_tracker.infrastructure.config import get_settings
from progress_tracker.infrastructure.database.session import AsyncSessionLocal
from progress_tracker.infrastructure.systems.bars.repository import open_bar_store
from progress_tracker.presentation.api.v1.router import api_v1_router
from progress_tracker.presentation.middleware.exception_handlers import register_exception_handlers
from progress_tracker.presentation.middleware.request_id import RequestIdMiddleware

settings = get_settings()

# ── Logging ──
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# LIFESPAN
# ════════════════════════════════════════════════════════════════
@asynccontextmanager
async def lifespan(app: FastAPI):
    dispatcher.clear()
    register_all_handlers(dispatcher)

    sweeper = None
    if settings.AUTO_UPDATE_ENABLED:
        sweeper = AutoUpdateService(open_bar_store, settings.AUTO_UPDATE_INTERVAL_SECONDS)
        sweeper.start()
    app.state.sweeper = sweeper
    logger.info("✅ App started: handlers registrados, varredura=%s", bool(sweeper))

    yield

    if sweeper is not None:
        await sweeper.stop()
    logger.info("🛑 App shutting down")


# ════════════════════════════════════════════════════════════════
# APP
# ════════════════════════════════════════════════════════════════
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Barras de progresso baseadas em tempo: count-up, count-down e "
        "arrival-date, com validação de datas e status derivado do relógio."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
    responses={
        404: {"description": "Recurso não encontrado"},
        422: {"description": "Erro de validação"},
        500: {"description": "Erro interno do servidor"},
    },
)

# ── Middleware ──
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# ── Exception handlers globais ──
register_exception_handlers(app)

# ── Rotas versionadas ──
app.include_router(api_v1_router, prefix="/api/v1")


# ════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ════════════════════════════════════════════════════════════════
@app.get(
    "/health",
    tags=["❤️ Health"],
    summary="Verificação de saúde da API",
    description="Retorna status da API e conectividade com o banco de dados.",
)
async def health_check():
    db_ok = False
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        logger.warning("Health check: banco indisponível", exc_info=True)

    return {
        "status": "ok" if db_ok else "degraded",
        "version": settings.APP_VERSION,
        "database": "connected" if db_ok else "disconnected",
    }

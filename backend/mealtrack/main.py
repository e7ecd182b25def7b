"""
Point d'entrée principal de l'API MealTrack.
Démarrage : uvicorn mealtrack.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import mealtrack.models  # noqa: F401 : enregistre tous les modèles dans Base.metadata avant les routers
from mealtrack.config import settings
from mealtrack.database import SessionLocal, init_db
from mealtrack.error_handler import application_error_handler
from mealtrack.exceptions import BaseApplicationError
from mealtrack.routers import attendance, groups, registrations
from mealtrack.scheduler import QueueMonitor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : crée, démarre et arrête le QueueMonitor."""
    if settings.AUTO_CREATE_TABLES:
        init_db()
    monitor = QueueMonitor(SessionLocal)
    app.state.queue_monitor = monitor
    if settings.SCHEDULER_ENABLED:
        monitor.start()
    yield
    monitor.stop()


app = FastAPI(
    title="MealTrack API",
    description="File d'attente du comedor : inscriptions, renforts et présences d'élèves",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "X-Actor-Id", "X-Actor-Role"],
)


app.include_router(groups.router)
app.include_router(registrations.router)
app.include_router(attendance.router)

app.add_exception_handler(BaseApplicationError, application_error_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error_code": "INTERNAL_ERROR",
            "message": "Une erreur interne est survenue.",
            "details": {},
        },
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "MealTrack API", "version": "0.1.0"}


@app.get("/api/v1/board", tags=["Inscriptions"], summary="Dernier tableau calculé par le planificateur")
def get_cached_board(request: Request):
    """Tableau maintenu par le QueueMonitor (null tant qu'aucun rechargement n'a eu lieu)."""
    board = request.app.state.queue_monitor.snapshot()
    return board.model_dump(mode="json") if board else None

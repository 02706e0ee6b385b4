"""
Applicazione FastAPI - Bengkel Manager
Progetto: Bengkel Manager (Gestionale Officina)

Avvio: uvicorn bengkel.main:app --reload (dalla cartella backend/)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bengkel.api import api_v1_router
from bengkel.core.config import settings
from bengkel.core.database import close_db, init_db, ping_db
from bengkel.core.exceptions import AppException

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Avvio {settings.app_name} v{settings.app_version} ({settings.app_env})")
    await init_db()
    yield
    await close_db()
    logger.info(f"{settings.app_name} arrestato")


app = FastAPI(
    title=settings.app_name,
    description="Bengkel Manager: catalogo, veicoli, clienti e fatturazione officina",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Gestione errori
# ------------------------------------------------------------

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Eccezioni di dominio: status code e corpo definiti dall'eccezione."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    # Vincoli violati al commit nei router (es. nome/targa duplicati)
    logger.warning(f"Vincolo violato su {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Operazione in conflitto con dati esistenti", "error_code": "CONFLICT"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Errore non gestito su {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Errore interno del server"},
    )


# ------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------

@app.get("/health", name="health", summary="Stato applicazione e database", tags=["System"])
async def health_check() -> JSONResponse:
    try:
        await ping_db()
        database = "ok"
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Health check: database non raggiungibile: {e}")
        database = "unavailable"

    return JSONResponse(
        status_code=status.HTTP_200_OK if database == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if database == "ok" else "degraded",
            "database": database,
            "app": settings.app_name,
            "version": settings.app_version,
        },
    )


app.include_router(api_v1_router)

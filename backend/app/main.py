"""
Main Entry Point - FastAPI Application
Progetto: Invoice Manager (Gestionale Fatture)

Configura l'applicazione FastAPI con middleware, router, gestori
di errore e lifecycle.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import api_router, health
from app.core.config import settings
from app.core.database import AsyncSessionLocal, close_db, init_db
from app.core.exceptions import AppException, AuthError
from app.services.auth_service import get_auth_service

# ------------------------------------------------------------
# Configurazione Logging
# ------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def bootstrap_admin() -> None:
    """Crea l'amministratore iniziale se configurato e non ancora presente."""
    if not (
        settings.bootstrap_admin_username
        and settings.bootstrap_admin_email
        and settings.bootstrap_admin_password
    ):
        return

    async with AsyncSessionLocal() as session:
        admin = await get_auth_service().ensure_admin(
            session,
            settings.bootstrap_admin_username,
            settings.bootstrap_admin_email,
            settings.bootstrap_admin_password,
        )
        await session.commit()
    if admin is not None:
        logger.info("Amministratore iniziale disponibile: %s", admin.username)


# ------------------------------------------------------------
# Lifespan Handler
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestisce il ciclo di vita dell'applicazione.

    - Startup: inizializza il database e l'amministratore iniziale
    - Shutdown: chiude le connessioni database
    """
    # Startup
    logger.info("Avvio %s v%s (%s)", settings.app_name, settings.app_version, settings.app_env)
    await init_db()
    await bootstrap_admin()
    logger.info("Applicazione avviata con successo")

    yield

    # Shutdown
    logger.info("Arresto applicazione in corso...")
    await close_db()
    logger.info("Applicazione arrestata")


# ------------------------------------------------------------
# FastAPI Application
# ------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    description="Gestionale fatture e clienti - Backend API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
def error_body(message: str, error_code: str, extra=None) -> dict:
    """Body uniforme per le risposte di errore."""
    body = {"success": False, "message": message, "error_code": error_code}
    if extra:
        body["extra"] = extra
    return body


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Gestore per le eccezioni applicative.

    Lo status HTTP è quello dichiarato dalla classe dell'eccezione.
    """
    if exc.status_code >= 500:
        logger.error("%s %s: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error_code)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, exc.error_code, exc.extra),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Gestore per gli errori di formato delle richieste.

    Converte l'errore Pydantic in 400 con il primo messaggio leggibile.
    """
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Dati della richiesta non validi"

    return JSONResponse(
        status_code=400,
        content=error_body(
            message,
            "VALIDATION_ERROR",
            {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
        ),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Gestore per route inesistenti e metodi non consentiti."""
    if exc.status_code == 404:
        message = f"Route {request.url.path} non trovata"
        error_code = "ROUTE_NOT_FOUND"
    else:
        message = str(exc.detail)
        error_code = "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, error_code),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Gestore generico per tutte le eccezioni non catturate.

    Converte l'eccezione in risposta HTTP 500 e logga l'errore.
    Lo stack trace è incluso solo in modalità debug.
    """
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)

    body = error_body("Errore interno del server", "INTERNAL_SERVER_ERROR")
    if settings.debug:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=body)


# ------------------------------------------------------------
# Middleware CORS
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Router
# ------------------------------------------------------------
app.include_router(health.router)
app.include_router(api_router)

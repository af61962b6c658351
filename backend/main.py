import logging
import os
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import ConnectionFailure
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .database import ConnectionState
from .errors import DatabaseConnectionError
from .middleware import (
    GENERIC_ERROR_MESSAGE,
    BodySizeLimitMiddleware,
    EnsureConnectedMiddleware,
    ErrorHandlerMiddleware,
)
from .registry import DEFAULT_ROUTE_TABLE, RouteEntry, register_routes

logger = logging.getLogger(__name__)

API_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


class ExecutionMode(str, Enum):
    PERSISTENT = "persistent"
    PER_INVOCATION = "per_invocation"


class OptionalStaticFiles(StaticFiles):
    """
    StaticFiles que responde 404 si el directorio no existe (todavía), en vez
    de fallar con RuntimeError.
    """

    async def check_config(self) -> None:
        if self.directory is not None and not os.path.isdir(self.directory):
            return
        await super().check_config()


def _db_status(connector) -> str:
    return "Connected" if connector.current_state() == ConnectionState.CONNECTED else "Disconnected"


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"error": "Validation failed", "details": jsonable_errors(exc)},
        )

    @app.exception_handler(DatabaseConnectionError)
    @app.exception_handler(ConnectionFailure)
    async def database_unavailable(request: Request, exc: Exception):
        logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={
                "error": "Database unavailable",
                "message": GENERIC_ERROR_MESSAGE if settings.is_production else str(exc),
            },
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx puede traer la excepción original, que no es serializable
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def create_app(
    settings: Settings,
    connector,
    mode: ExecutionMode = ExecutionMode.PERSISTENT,
    route_table: Iterable[RouteEntry] = DEFAULT_ROUTE_TABLE,
) -> FastAPI:
    """
    Construye la app completa. El modo solo cambia cuándo se conecta a la
    base de datos y qué pasa al apagar; las rutas son las mismas.
    """
    app = FastAPI(
        title="Healthcare Database API",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.connector = connector
    app.state.mode = mode

    app.state.startup_report = register_routes(app, route_table)

    @app.get("/")
    def read_root():
        return {
            "status": "Healthcare Database API",
            "dbStatus": _db_status(connector),
            "environment": settings.environment.value,
        }

    @app.get("/api/health")
    def health():
        return {
            "status": "API is running",
            "dbStatus": _db_status(connector),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # tiene que ir después de todas las rutas reales
    @app.api_route("/api/{unmatched_path:path}", methods=API_METHODS, include_in_schema=False)
    def api_not_found(request: Request, unmatched_path: str):
        return JSONResponse(
            status_code=404,
            content={
                "error": "API endpoint not found",
                "path": request.url.path,
                "attemptedRoute": unmatched_path.split("/", 1)[0],
            },
        )

    # no se crean los directorios: en Lambda/Vercel el disco es de solo lectura
    app.mount("/uploads", OptionalStaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")
    app.mount("/", OptionalStaticFiles(directory=settings.public_dir, check_dir=False), name="public")

    _install_error_handlers(app, settings)

    # en producción un proceso persistente tampoco se queda sin base de datos
    # para siempre si el connect() inicial falló
    if mode == ExecutionMode.PER_INVOCATION or settings.is_production:
        app.add_middleware(EnsureConnectedMiddleware)

    if mode == ExecutionMode.PERSISTENT:
        @app.on_event("shutdown")
        def on_shutdown():
            connector.disconnect()

    app.add_middleware(ErrorHandlerMiddleware, production=settings.is_production)
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    # en desarrollo se acepta cualquier origen (se devuelve el mismo Origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_origin_regex=None if settings.is_production else r".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app

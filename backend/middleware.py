import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from .errors import HandlerError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Please try again later"


class BodySizeLimitMiddleware:
    """
    Corta los cuerpos JSON / urlencoded / multipart que pasan de `max_body_bytes`.

    Si llega Content-Length se responde 413 sin tocar la app; si el cuerpo
    viene en streaming se lee entero aquí (como mucho el límite) y también
    se responde 413 antes de llegar a la app.
    """

    def __init__(self, app, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    def _too_large(self) -> JSONResponse:
        return JSONResponse(
            status_code=413,
            content={"error": "Payload too large", "limit": self.max_body_bytes},
        )

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        declared = headers.get(b"content-length")
        if declared is not None:
            try:
                declared_size = int(declared)
            except ValueError:
                declared_size = 0
            if declared_size > self.max_body_bytes:
                logger.warning(
                    "Rejected %s %s: body of %d bytes over limit",
                    scope.get("method"),
                    scope.get("path"),
                    declared_size,
                )
                await self._too_large()(scope, receive, send)
                return

        # sin Content-Length (chunked): se lee el cuerpo aquí, hasta el límite,
        # y luego se le entrega a la app tal cual
        if declared is None and b"transfer-encoding" in headers:
            buffered = []
            received = 0
            more_body = True
            while more_body:
                message = await receive()
                buffered.append(message)
                if message["type"] != "http.request":
                    break
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.warning(
                        "Rejected %s %s: streamed body over limit",
                        scope.get("method"),
                        scope.get("path"),
                    )
                    await self._too_large()(scope, receive, send)
                    return
                more_body = message.get("more_body", False)

            async def replay():
                if buffered:
                    return buffered.pop(0)
                return await receive()

            await self.app(scope, replay, send)
            return

        await self.app(scope, receive, send)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Último recurso: cualquier excepción que se escape de un handler acaba
    como JSON. En producción no se devuelve el mensaje interno.
    """

    def __init__(self, app, production: bool):
        super().__init__(app)
        self.production = production

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HandlerError as exc:
            logger.error("Handler error on %s %s: %s", request.method, request.url.path, exc)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": "Request failed" if exc.status_code < 500 else "Internal server error",
                    "message": GENERIC_ERROR_MESSAGE if self.production and exc.status_code >= 500 else str(exc),
                    **exc.detail,
                },
            )
        except Exception as exc:
            logger.exception("Server Error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": GENERIC_ERROR_MESSAGE if self.production else str(exc),
                },
            )


class EnsureConnectedMiddleware(BaseHTTPMiddleware):
    """
    Modo por invocación: antes de cada petición se comprueba la conexión y
    se reintenta si hace falta. Si falla, la petición sigue igual; los
    handlers que necesiten la base de datos responderán 503.
    """

    async def dispatch(self, request: Request, call_next):
        connector = request.app.state.connector
        if not connector.is_connected:
            await run_in_threadpool(connector.ensure_connected)
        return await call_next(request)

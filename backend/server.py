"""
Arranque en modo proceso persistente (desarrollo local o hosting clásico).

    python -m backend.server

Conecta a MongoDB una vez, y después uvicorn escucha en PORT. Con Ctrl+C
uvicorn apaga la app, que cierra la conexión antes de salir con código 0.
"""
import logging
import sys

import uvicorn

from .config import configure_logging, load_settings
from .database import DatabaseConnector
from .errors import ConfigurationError, DatabaseConnectionError
from .main import ExecutionMode, create_app

logger = logging.getLogger(__name__)


def run() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info("Environment: %s", settings.environment.value)

    connector = DatabaseConnector.from_settings(settings)
    try:
        connector.connect()
    except (ConfigurationError, DatabaseConnectionError) as exc:
        logger.error("Server startup failed: %s", exc)
        # en producción se sigue arrancando y se reintenta en cada petición
        if not settings.is_production:
            sys.exit(1)

    app = create_app(settings, connector, ExecutionMode.PERSISTENT)
    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

import logging
import os
from enum import Enum
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# Frontends que consumen la API
DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "https://v-web-frontend-flame.vercel.app",
    "https://v-web-frontend-s8pe.vercel.app",
)

DEFAULT_PORT = 6002
DEFAULT_MAX_BODY_MB = 10


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseModel):
    """
    Configuración del proceso. Se construye una vez al arrancar y no cambia.
    """
    model_config = ConfigDict(frozen=True)

    environment: Environment = Environment.DEVELOPMENT
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    database_uri: Optional[str] = None
    database_name: str = "healthcare"
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    max_body_bytes: int = DEFAULT_MAX_BODY_MB * 1024 * 1024
    public_dir: str = "public"
    uploads_dir: str = "uploads"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


def _parse_environment(raw: Optional[str]) -> Environment:
    if not raw:
        return Environment.DEVELOPMENT
    try:
        return Environment(raw.strip().lower())
    except ValueError:
        logger.warning("Unknown NODE_ENV %r, falling back to development", raw)
        return Environment.DEVELOPMENT


def _parse_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def _allowed_origins(frontend_url: Optional[str]) -> tuple[str, ...]:
    origins = list(DEFAULT_ALLOWED_ORIGINS)
    if frontend_url:
        extra = frontend_url.strip().rstrip("/")
        if extra and extra not in origins:
            origins.append(extra)
    return tuple(origins)


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    env_file: str = "config.env",
) -> Settings:
    """
    Lee la configuración del entorno del proceso.

    Solo en desarrollo se mezcla `env_file` en os.environ (sin pisar lo que
    ya exista). Si falta ATLAS_URI no se falla aquí: el conector de la base
    de datos lo detecta al conectar.
    """
    if env is None:
        environment = _parse_environment(os.getenv("NODE_ENV"))
        if environment == Environment.DEVELOPMENT:
            if load_dotenv(env_file, override=False):
                logger.info("Development environment variables loaded from %s", env_file)
            else:
                logger.warning("%s not found, using process environment variables", env_file)
        env = os.environ
    else:
        environment = _parse_environment(env.get("NODE_ENV"))

    max_body_mb = _parse_int("MAX_BODY_SIZE_MB", env.get("MAX_BODY_SIZE_MB"), DEFAULT_MAX_BODY_MB)

    return Settings(
        environment=environment,
        host=env.get("HOST") or "0.0.0.0",
        port=_parse_int("PORT", env.get("PORT"), DEFAULT_PORT),
        database_uri=env.get("ATLAS_URI") or None,
        database_name=env.get("DB_NAME") or "healthcare",
        allowed_origins=_allowed_origins(env.get("FRONTEND_URL")),
        max_body_bytes=max_body_mb * 1024 * 1024,
        public_dir=env.get("PUBLIC_DIR") or "public",
        uploads_dir=env.get("UPLOADS_DIR") or "uploads",
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

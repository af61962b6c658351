"""
Registro de rutas de la API.

Cada módulo de `backend.routes` se monta bajo /api/<mount_name>. Si un
módulo falla al importarse o al construir su router, se registra el fallo y
se sigue con el resto: esa ruta simplemente no existe y sus peticiones caen
en el 404 genérico. No hay rutas de reserva.
"""
import importlib
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Iterable, Optional

from fastapi import APIRouter, FastAPI

from .errors import RouteLoadError

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def router_from_module(module_name: str) -> APIRouter:
    module = importlib.import_module(module_name)
    return module.router


@dataclass(frozen=True)
class RouteEntry:
    mount_name: str
    factory: Callable[[], APIRouter]

    @property
    def mount_path(self) -> str:
        return f"{API_PREFIX}/{self.mount_name}"

    @classmethod
    def for_module(cls, mount_name: str, module: str) -> "RouteEntry":
        return cls(mount_name, partial(router_from_module, f"backend.routes.{module}"))


@dataclass(frozen=True)
class RouteLoadResult:
    mount_name: str
    loaded: bool
    error: Optional[RouteLoadError] = None


@dataclass
class StartupReport:
    results: list[RouteLoadResult] = field(default_factory=list)

    @property
    def loaded(self) -> list[str]:
        return [r.mount_name for r in self.results if r.loaded]

    @property
    def failed(self) -> list[str]:
        return [r.mount_name for r in self.results if not r.loaded]

    def summary(self) -> str:
        return f"{len(self.loaded)}/{len(self.results)} routes loaded"


DEFAULT_ROUTE_TABLE = (
    RouteEntry.for_module("about", "about"),
    RouteEntry.for_module("collections", "collections"),
    RouteEntry.for_module("services", "services"),
    RouteEntry.for_module("hospitals", "hospitals"),
    RouteEntry.for_module("procedure-costs", "procedure_costs"),
    RouteEntry.for_module("patient-opinions", "patient_opinions"),
    RouteEntry.for_module("faqs", "faqs"),
    RouteEntry.for_module("assistance", "assistance"),
    RouteEntry.for_module("doctors", "doctors"),
    RouteEntry.for_module("treatments", "treatments"),
    RouteEntry.for_module("doctor-treatment", "doctor_treatments"),
    RouteEntry.for_module("hospital-treatment", "hospital_treatments"),
    RouteEntry.for_module("booking", "bookings"),
    RouteEntry.for_module("admin", "admin"),
    RouteEntry.for_module("language", "language"),
    RouteEntry.for_module("headings", "headings"),
    RouteEntry.for_module("blogs", "blogs"),
    RouteEntry.for_module("upload", "upload"),
    RouteEntry.for_module("patients", "patients"),
)


def load_route(app: FastAPI, entry: RouteEntry) -> RouteLoadResult:
    try:
        router = entry.factory()
        app.include_router(router, prefix=entry.mount_path, tags=[entry.mount_name])
    except Exception as exc:
        error = RouteLoadError(entry.mount_name, exc)
        logger.error("Failed to load route %s: %s", entry.mount_name, exc)
        return RouteLoadResult(entry.mount_name, False, error)

    logger.info("Loaded route: %s", entry.mount_path)
    return RouteLoadResult(entry.mount_name, True)


def register_routes(app: FastAPI, table: Iterable[RouteEntry] = DEFAULT_ROUTE_TABLE) -> StartupReport:
    report = StartupReport([load_route(app, entry) for entry in table])
    if report.failed:
        logger.warning("%s (failed: %s)", report.summary(), ", ".join(report.failed))
    else:
        logger.info(report.summary())
    return report

from typing import Optional


class BackendError(Exception):
    """Base de los errores propios del backend."""


class ConfigurationError(BackendError):
    """Falta un ajuste obligatorio (p. ej. ATLAS_URI)."""


class DatabaseConnectionError(BackendError):
    """No se pudo conectar con MongoDB o no hay conexión activa."""


class RouteLoadError(BackendError):
    def __init__(self, mount_name: str, cause: BaseException):
        super().__init__(f"Failed to load route {mount_name}: {cause}")
        self.mount_name = mount_name
        self.cause = cause


class HandlerError(BackendError):
    """
    Error de un handler con un status HTTP declarado.
    El middleware de errores lo convierte en JSON.
    """

    def __init__(self, message: str, status_code: int = 500, detail: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or {}

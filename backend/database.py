import logging
import threading
from enum import Enum
from typing import Callable, Optional

from fastapi import Request
from pymongo import MongoClient, monitoring
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .errors import ConfigurationError, DatabaseConnectionError

logger = logging.getLogger(__name__)

SERVER_SELECTION_TIMEOUT_MS = 5000
SOCKET_TIMEOUT_MS = 30000
MAX_POOL_SIZE = 10


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class _LifecycleListener(monitoring.TopologyListener, monitoring.ServerHeartbeatListener):
    """
    Escucha los eventos del driver. Solo registra en el log y actualiza el
    estado del conector; nunca reintenta nada por su cuenta.
    """

    def __init__(self, connector: "DatabaseConnector"):
        self._connector = connector

    # topology
    def opened(self, event):
        pass

    def description_changed(self, event):
        new = event.new_description
        available = new.has_writable_server() or new.has_readable_server()
        self._connector._on_availability_change(available)

    def closed(self, event):
        pass

    # heartbeats
    def started(self, event):
        pass

    def succeeded(self, event):
        pass

    def failed(self, event):
        # cada 10 s por servidor; la caída en sí se registra en _on_availability_change
        logger.debug("MongoDB heartbeat to %s failed: %s", event.connection_id, event.reply)


class DatabaseConnector:
    """
    Dueño único de la conexión a MongoDB.

    `connect()` es idempotente y se puede llamar desde varios hilos a la vez:
    todos acaban viendo el mismo cliente. El estado lo mueven los eventos del
    driver, no la lógica de la aplicación.
    """

    def __init__(
        self,
        uri: Optional[str],
        database_name: str = "healthcare",
        client_factory: Callable[..., MongoClient] = MongoClient,
    ):
        self.uri = uri
        self.database_name = database_name
        self._client_factory = client_factory
        self._client: Optional[MongoClient] = None
        self._state = ConnectionState.DISCONNECTED
        self._state_lock = threading.Lock()
        self._connect_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> "DatabaseConnector":
        return cls(settings.database_uri, settings.database_name)

    def current_state(self) -> ConnectionState:
        with self._state_lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        return self.current_state() == ConnectionState.CONNECTED

    def _set_state(self, state: ConnectionState) -> None:
        with self._state_lock:
            self._state = state

    def _on_availability_change(self, available: bool) -> None:
        with self._state_lock:
            # el resultado del connect() inicial lo decide connect()
            if self._state == ConnectionState.CONNECTING:
                return
            if available and self._state != ConnectionState.CONNECTED:
                self._state = ConnectionState.CONNECTED
                logger.info("MongoDB reconnected")
            elif not available and self._state == ConnectionState.CONNECTED:
                self._state = ConnectionState.DISCONNECTED
                logger.warning("MongoDB disconnected")

    def connect(self) -> None:
        if not self.uri:
            raise ConfigurationError("ATLAS_URI environment variable is not defined")

        with self._connect_lock:
            if self.current_state() == ConnectionState.CONNECTED:
                return

            self._set_state(ConnectionState.CONNECTING)
            client = self._client
            try:
                if client is None:
                    client = self._client_factory(
                        self.uri,
                        serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
                        socketTimeoutMS=SOCKET_TIMEOUT_MS,
                        maxPoolSize=MAX_POOL_SIZE,
                        retryWrites=True,
                        w="majority",
                        event_listeners=[_LifecycleListener(self)],
                    )
                client.admin.command("ping")
            except PyMongoError as exc:
                if client is not None:
                    client.close()
                self._client = None
                self._set_state(ConnectionState.ERROR)
                logger.error("MongoDB connection error: %s", exc)
                raise DatabaseConnectionError(str(exc)) from exc

            self._client = client
            self._set_state(ConnectionState.CONNECTED)
            logger.info("MongoDB connected (database=%s)", self.database_name)

    def ensure_connected(self) -> bool:
        """
        Para el modo por invocación: intenta conectar si hace falta y nunca
        lanza. Devuelve si quedó conectado.
        """
        if self.is_connected:
            return True
        try:
            self.connect()
        except (ConfigurationError, DatabaseConnectionError) as exc:
            logger.error("Database connection failed in handler: %s", exc)
            return False
        return True

    def get_database(self) -> Database:
        client = self._client
        if client is None:
            raise DatabaseConnectionError("Database connection has not been established")
        return client[self.database_name]

    def disconnect(self) -> None:
        with self._connect_lock:
            client, self._client = self._client, None
            self._set_state(ConnectionState.DISCONNECTED)
        if client is not None:
            client.close()
            logger.info("MongoDB connection closed")


def get_database(request: Request) -> Database:
    """
    Dependencia de FastAPI que devuelve la base de datos activa.
    """
    return request.app.state.connector.get_database()

"""
Fixtures compartidas: un conector falso (sin MongoDB real) y una fábrica
de apps/clients sobre directorios temporales.
"""
from collections import defaultdict
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from backend.config import Environment, Settings
from backend.database import ConnectionState
from backend.errors import DatabaseConnectionError
from backend.main import ExecutionMode, create_app


class FakeConnector:
    """Implementa la misma interfaz que DatabaseConnector."""

    def __init__(self, connected: bool = False, database=None, connects_on_demand: bool = False):
        self.state = ConnectionState.CONNECTED if connected else ConnectionState.DISCONNECTED
        self.database = database
        self.connects_on_demand = connects_on_demand
        self.ensure_calls = 0
        self.disconnect_calls = 0

    def current_state(self):
        return self.state

    @property
    def is_connected(self):
        return self.state == ConnectionState.CONNECTED

    def connect(self):
        self.state = ConnectionState.CONNECTED

    def ensure_connected(self):
        self.ensure_calls += 1
        if self.connects_on_demand:
            self.state = ConnectionState.CONNECTED
        return self.is_connected

    def get_database(self):
        if self.database is None or not self.is_connected:
            raise DatabaseConnectionError("Database connection has not been established")
        return self.database

    def disconnect(self):
        self.disconnect_calls += 1
        self.state = ConnectionState.DISCONNECTED


def make_mock_database():
    """Base de datos falsa: db[nombre] devuelve siempre el mismo MagicMock por colección."""
    collections = defaultdict(MagicMock)
    db = MagicMock()
    db.__getitem__.side_effect = collections.__getitem__
    db.collections = collections
    return db


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = {
            "environment": Environment.DEVELOPMENT,
            "public_dir": str(tmp_path / "public"),
            "uploads_dir": str(tmp_path / "uploads"),
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def mock_db():
    return make_mock_database()


@pytest.fixture
def connector(mock_db):
    return FakeConnector(connected=True, database=mock_db)


@pytest.fixture
def make_client(make_settings):
    def _make(connector, mode=ExecutionMode.PERSISTENT, route_table=None, **settings_overrides):
        settings = make_settings(**settings_overrides)
        kwargs = {}
        if route_table is not None:
            kwargs["route_table"] = route_table
        app = create_app(settings, connector, mode, **kwargs)
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture
def client(make_client, connector):
    return make_client(connector)

"""Fixtures for API tests.

Each test gets a fresh app on in-memory stores with the backup directory
and error log under tmp_path and the periodic jobs disabled.
"""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gestao_demandas.api.app import create_app
from gestao_demandas.config import get_settings


@pytest.fixture
def api_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("DEMANDAS_STORAGE__BACKEND", "inmemory")
    monkeypatch.setenv("DEMANDAS_BACKUP__DIRECTORY", str(tmp_path / "backups"))
    monkeypatch.setenv("DEMANDAS_BACKUP__SCHEDULER_ENABLED", "false")
    monkeypatch.setenv("DEMANDAS_BACKUP__FINAL_SNAPSHOT_ON_SHUTDOWN", "false")
    monkeypatch.setenv("DEMANDAS_OBSERVABILITY__ERROR_LOG_PATH", str(tmp_path / "error.log"))
    get_settings.cache_clear()
    return tmp_path


@pytest.fixture
def app(api_env: Path) -> FastAPI:
    return create_app()


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def backup_dir(api_env: Path) -> Path:
    return api_env / "backups"


@pytest.fixture
def create_demanda(
    client: TestClient, demanda_payload: dict
) -> Callable[..., dict]:
    """Create a demanda through the API and return its wire representation."""

    def _create(**overrides) -> dict:
        response = client.post("/api/demandas", json={**demanda_payload, **overrides})
        assert response.status_code == 200, response.text
        return response.json()["demanda"]

    return _create

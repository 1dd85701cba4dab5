"""Tests for app-level behaviour: health, metrics, errors, lifecycle."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gestao_demandas.api.app import create_app
from gestao_demandas.api.dependencies import get_demanda_service, get_demanda_store
from gestao_demandas.db.errors import ConnectionError


class TestHealth:
    def test_health_ok(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["demandas"] == 0
        assert body["integrity"] == "ok"
        assert body["uptime"] >= 0
        assert "maxRssKb" in body["memory"]

    def test_health_store_failure(self, app: FastAPI) -> None:
        broken = MagicMock()
        broken.count = AsyncMock(side_effect=ConnectionError("database down"))
        app.dependency_overrides[get_demanda_store] = lambda: broken

        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 500
        assert response.json()["status"] == "ERROR"

    def test_metrics(self, client: TestClient) -> None:
        client.get("/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "demandas_request_count_total" in response.text


class TestErrorEnvelopes:
    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/api/nada")

        assert response.status_code == 404
        body = response.json()
        assert body == {
            "success": False,
            "error": "Rota não encontrada",
            "code": "ROUTE_NOT_FOUND",
            "path": "/api/nada",
            "method": "GET",
            "timestamp": body["timestamp"],
        }

    def test_method_not_allowed(self, client: TestClient) -> None:
        response = client.patch("/api/demandas")

        assert response.status_code == 405
        assert response.json()["code"] == "METHOD_NOT_ALLOWED"

    def test_unexpected_error_is_logged_to_file(self, app: FastAPI, api_env: Path) -> None:
        broken = MagicMock()
        broken.search = AsyncMock(side_effect=RuntimeError("kaboom"))
        app.dependency_overrides[get_demanda_service] = lambda: broken

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/demandas/search", params={"q": "abc"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Erro interno do servidor"
        assert body["message"] == "kaboom"
        log = (api_env / "error.log").read_text(encoding="utf-8")
        assert "ERROR:" in log
        assert "kaboom" in log


class TestRequestContext:
    def test_request_id_echoed(self, client: TestClient) -> None:
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_generated(self, client: TestClient) -> None:
        response = client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 36


class TestLifecycle:
    def test_shutdown_snapshot(
        self, api_env: Path, monkeypatch: pytest.MonkeyPatch, demanda_payload: dict
    ) -> None:
        monkeypatch.setenv("DEMANDAS_BACKUP__FINAL_SNAPSHOT_ON_SHUTDOWN", "true")
        app = create_app()

        with TestClient(app) as client:
            client.post("/api/demandas", json=demanda_payload)

        files = list((api_env / "backups").glob("backup_shutdown_*.json"))
        assert len(files) == 1
        assert "Revisar contrato" in files[0].read_text(encoding="utf-8")

    def test_no_shutdown_snapshot_when_disabled(self, app: FastAPI, api_env: Path) -> None:
        with TestClient(app) as client:
            client.get("/health")

        assert not list((api_env / "backups").glob("backup_shutdown_*.json"))

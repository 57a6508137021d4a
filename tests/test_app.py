import asyncio
import time

import httpx
from fastapi.testclient import TestClient

from celpip_api.api.v1.endpoints import sets as sets_endpoints
from celpip_api.core.config import settings
from celpip_api.core.exceptions import StoreError
from celpip_api.main import app

from conftest import make_set


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json() == {"status": "healthy"}


def test_store_error_maps_to_500(client, api_prefix, monkeypatch):
    def failing_save(session, payload):
        raise StoreError("Failed to save practice set set-1")

    monkeypatch.setattr(sets_endpoints, "save_practice_set", failing_save)

    response = client.post(f"{api_prefix}/sets", json=make_set())
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to save practice set set-1", "type": "StoreError"}


def test_unhandled_errors_hide_details_outside_development(client, api_prefix, monkeypatch):
    def broken_list(session, published_only=False):
        raise RuntimeError("connection string with secrets")

    monkeypatch.setattr(sets_endpoints, "list_practice_sets", broken_list)
    monkeypatch.setattr(settings, "environment", "production")

    raw_client = TestClient(app, raise_server_exceptions=False)
    response = raw_client.get(f"{api_prefix}/sets")
    assert response.status_code == 500
    assert "secrets" not in response.text
    assert response.json()["type"] == "InternalServerError"


def test_validation_errors_are_serializable(client, api_prefix):
    payload = make_set(sections=[{"id": "s", "type": "READING", "parts": [
        {"id": "p", "questions": [{"id": "q", "type": "MCQ"}], "segments": [{"id": "seg"}]},
    ]}])
    response = client.post(f"{api_prefix}/sets", json=payload)
    assert response.status_code == 422
    assert any("both questions and segments" in error["msg"] for error in response.json()["detail"])


def test_slow_database_work_does_not_stall_other_requests(client, api_prefix, monkeypatch):
    def slow_list(session, published_only=False):
        time.sleep(1.0)
        return []

    monkeypatch.setattr(sets_endpoints, "list_practice_sets", slow_list)

    async def request_health_during_slow_read():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
            slow_read = asyncio.create_task(http.get(f"{api_prefix}/sets"))
            await asyncio.sleep(0.1)
            started = time.monotonic()
            health = await http.get("/health")
            elapsed = time.monotonic() - started
            return health, elapsed, await slow_read

    health, elapsed, sets_response = asyncio.run(request_health_during_slow_read())

    assert health.status_code == 200
    assert elapsed < 0.5
    assert sets_response.json() == []

"""API 기본 테스트 (FastAPI TestClient, 인메모리 저장소 주입)"""

from __future__ import annotations

import base64
import json

import pytest
from fastapi.testclient import TestClient

from tests.fixtures.voters import SEED_SIZE, VALID_PAYLOAD, expected_order, seed_id
from voter_registry.api import get_voter_service
from voter_registry.app import app


@pytest.fixture
def client(voter_service):
    app.dependency_overrides[get_voter_service] = lambda: voter_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["store_backend"] == "memory"


def test_list_voters_page(client):
    response = client.get("/api/v1/voters", params={"page": 1, "page_size": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == SEED_SIZE
    assert body["total_pages"] == 3
    assert [r["id"] for r in body["data"]] == expected_order()[:10]
    assert body["stats"]["total"] == 10


def test_list_voters_filters(client):
    response = client.get("/api/v1/voters", params={"regiao": "Sul", "interacao": "false"})

    body = response.json()
    # i % 5 == 1 이고 홀수: 1, 11, 21
    assert body["count"] == 3
    assert body["total_pages"] == 1


def test_list_voters_invalid_page(client):
    response = client.get("/api/v1/voters", params={"page": 0})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert body["error_code"] == "InvalidArgument"


def test_keyset_walk(client):
    seen = []
    cursor = None
    while True:
        params = {"limit": 12}
        if cursor:
            params["cursor"] = cursor
        body = client.get("/api/v1/voters/keyset", params=params).json()
        seen.extend(r["id"] for r in body["data"])
        cursor = body["next_cursor"]
        if cursor is None:
            break

    assert seen == expected_order()


def test_keyset_bad_cursor(client):
    response = client.get("/api/v1/voters/keyset", params={"cursor": "lixo"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "InvalidArgument"


def test_create_get_update_delete(client):
    created = client.post("/api/v1/voters", json=VALID_PAYLOAD)
    assert created.status_code == 201
    voter_id = created.json()["data"]["id"]

    fetched = client.get(f"/api/v1/voters/{voter_id}")
    assert fetched.json()["data"]["nome"] == "Ana"

    updated = client.patch(f"/api/v1/voters/{voter_id}", json={"interacao": True})
    assert updated.status_code == 200
    assert updated.json()["data"]["interacao"] is True

    deleted = client.delete(f"/api/v1/voters/{voter_id}")
    assert deleted.status_code == 200
    assert client.get(f"/api/v1/voters/{voter_id}").status_code == 404


def test_create_invalid_payload(client):
    response = client.post("/api/v1/voters", json={"nome": "Ana"})

    assert response.status_code == 400
    assert "regiao" in response.json()["detail"]


def test_create_duplicate_cpf(client):
    response = client.post("/api/v1/voters", json={**VALID_PAYLOAD, "cpf": "999.999.999-99"})
    again = client.post("/api/v1/voters", json={**VALID_PAYLOAD, "cpf": "999.999.999-99"})

    assert response.status_code == 201
    assert again.status_code == 409
    assert again.json()["error_code"] == "DuplicateEntry"


def test_get_unknown_voter(client):
    response = client.get("/api/v1/voters/nao-existe")

    assert response.status_code == 404
    assert response.json()["error_code"] == "NotFound"


def test_export_csv(client):
    response = client.get("/api/v1/voters/export", params={"format": "csv", "regiao": "Norte"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("id,")
    assert len(lines) == 1 + 6


def test_export_unknown_format(client):
    response = client.get("/api/v1/voters/export", params={"format": "xml"})

    assert response.status_code == 400


def test_malformed_query_param_uses_envelope(client):
    response = client.get("/api/v1/voters", params={"page": "abc"})

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "InvalidArgument"
    assert "page" in body["detail"]


def test_keyset_cursor_without_timezone(client):
    token = base64.urlsafe_b64encode(
        json.dumps({"created_at": "2024-01-15T10:35:00", "id": seed_id(11)}).encode("utf-8")
    ).decode("ascii")

    response = client.get("/api/v1/voters/keyset", params={"limit": 5, "cursor": token})

    assert response.status_code == 200
    assert [r["id"] for r in response.json()["data"]] == [seed_id(i) for i in (10, 9, 8, 7, 6)]

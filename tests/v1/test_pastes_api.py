# tests/v1/test_pastes_api.py
"""HTTP tests for the paste and proof-of-work endpoints."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from delerium_paste.db.session import get_db
from delerium_paste.main import SECURITY_HEADERS
from delerium_paste.utils.pow_client import find_failing_nonce, find_pow_solution
from tests.conftest import SAMPLE_CT, SAMPLE_IV


def paste_body(**meta: Any) -> dict[str, Any]:
    meta.setdefault("expireTs", int(time.time()) + 3600)
    return {"ct": SAMPLE_CT, "iv": SAMPLE_IV, "meta": meta}


def test_create_read_delete_flow(client: TestClient) -> None:
    created = client.post("/api/pastes", json=paste_body(viewsAllowed=3, mime="text/plain"))
    assert created.status_code == 200
    data = created.json()
    paste_id, token = data["id"], data["deleteToken"]
    assert len(paste_id) == 10

    fetched = client.get(f"/api/pastes/{paste_id}")
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["ct"] == SAMPLE_CT
    assert body["iv"] == SAMPLE_IV
    assert body["meta"]["viewsAllowed"] == 3
    assert body["meta"]["mime"] == "text/plain"
    assert body["viewsLeft"] == 2

    deleted = client.delete(f"/api/pastes/{paste_id}", params={"token": token})
    assert deleted.status_code == 204
    assert deleted.content == b""

    gone = client.get(f"/api/pastes/{paste_id}")
    assert gone.status_code == 404
    assert gone.json() == {"error": "not_found"}


def test_single_view_paste(client: TestClient) -> None:
    paste_id = client.post("/api/pastes", json=paste_body(singleView=True)).json()["id"]

    assert client.get(f"/api/pastes/{paste_id}").status_code == 200
    assert client.get(f"/api/pastes/{paste_id}").status_code == 404


def test_views_left_counts_to_zero(client: TestClient) -> None:
    paste_id = client.post("/api/pastes", json=paste_body(viewsAllowed=2)).json()["id"]

    assert client.get(f"/api/pastes/{paste_id}").json()["viewsLeft"] == 1
    assert client.get(f"/api/pastes/{paste_id}").json()["viewsLeft"] == 0
    assert client.get(f"/api/pastes/{paste_id}").status_code == 404


def test_unknown_paste(client: TestClient) -> None:
    response = client.get("/api/pastes/doesnotexist")
    assert response.status_code == 404
    assert response.json() == {"error": "not_found"}


class TestCreateErrors:
    def test_malformed_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/pastes", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_json"}

    def test_missing_fields(self, client: TestClient) -> None:
        response = client.post("/api/pastes", json={"ct": SAMPLE_CT})
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_json"}

    def test_size_invalid(self, client: TestClient) -> None:
        body = paste_body()
        body["iv"] = "AAEC"
        response = client.post("/api/pastes", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "size_invalid"}

    def test_too_large(self, make_client: Callable[..., TestClient]) -> None:
        client = make_client(PASTE_MAX_SIZE_BYTES=16)
        response = client.post("/api/pastes", json=paste_body())
        assert response.status_code == 400
        assert response.json() == {"error": "size_invalid"}

    def test_expiry_too_soon(self, client: TestClient) -> None:
        response = client.post("/api/pastes", json=paste_body(expireTs=int(time.time()) + 5))
        assert response.status_code == 400
        assert response.json() == {"error": "expiry_too_soon"}


class TestDeleteErrors:
    def test_missing_token(self, client: TestClient) -> None:
        paste_id = client.post("/api/pastes", json=paste_body()).json()["id"]
        response = client.delete(f"/api/pastes/{paste_id}")
        assert response.status_code == 400
        assert response.json() == {"error": "missing_token"}

    def test_wrong_token(self, client: TestClient) -> None:
        paste_id = client.post("/api/pastes", json=paste_body()).json()["id"]
        response = client.delete(f"/api/pastes/{paste_id}", params={"token": "nope"})
        assert response.status_code == 403
        assert response.json() == {"error": "invalid_token"}
        assert client.get(f"/api/pastes/{paste_id}").status_code == 200

    def test_unknown_paste(self, client: TestClient) -> None:
        response = client.delete("/api/pastes/missing", params={"token": "anything"})
        assert response.status_code == 403


def test_security_headers_on_every_response(client: TestClient) -> None:
    for response in (client.get("/health"), client.get("/api/pastes/missing")):
        for name, value in SECURITY_HEADERS.items():
            assert response.headers[name] == value


class TestProofOfWork:
    def test_disabled_returns_no_content(self, client: TestClient) -> None:
        response = client.get("/api/pow")
        assert response.status_code == 204

    def test_challenge_and_create(self, make_client: Callable[..., TestClient]) -> None:
        client = make_client(POW_ENABLED=True, POW_DIFFICULTY=4)

        issued = client.get("/api/pow")
        assert issued.status_code == 200
        challenge = issued.json()
        assert challenge["difficulty"] == 4
        assert challenge["expiresAt"] > int(time.time())

        nonce, found = find_pow_solution(challenge["challenge"], 4)
        assert found
        body = paste_body()
        body["pow"] = {"challenge": challenge["challenge"], "nonce": nonce}

        assert client.post("/api/pastes", json=body).status_code == 200
        replay = client.post("/api/pastes", json=body)
        assert replay.status_code == 400
        assert replay.json() == {"error": "pow_invalid"}

    def test_missing_solution(self, make_client: Callable[..., TestClient]) -> None:
        client = make_client(POW_ENABLED=True, POW_DIFFICULTY=4)
        response = client.post("/api/pastes", json=paste_body())
        assert response.status_code == 400
        assert response.json() == {"error": "pow_required"}

    def test_wrong_nonce(self, make_client: Callable[..., TestClient]) -> None:
        client = make_client(POW_ENABLED=True, POW_DIFFICULTY=4)
        challenge = client.get("/api/pow").json()["challenge"]
        body = paste_body()
        body["pow"] = {"challenge": challenge, "nonce": find_failing_nonce(challenge, 4)}

        response = client.post("/api/pastes", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "pow_invalid"}


class TestRateLimiting:
    def test_burst_then_429(self, make_client: Callable[..., TestClient]) -> None:
        client = make_client(
            RATE_LIMIT_ENABLED=True, RATE_LIMIT_CAPACITY=2, RATE_LIMIT_REFILL_PER_MINUTE=0
        )
        statuses = [client.post("/api/pastes", json=paste_body()).status_code for _ in range(3)]
        assert statuses == [200, 200, 429]
        assert client.post("/api/pastes", json=paste_body()).json() == {"error": "rate_limited"}

    def test_reads_are_not_limited(self, make_client: Callable[..., TestClient]) -> None:
        client = make_client(
            RATE_LIMIT_ENABLED=True, RATE_LIMIT_CAPACITY=1, RATE_LIMIT_REFILL_PER_MINUTE=0
        )
        paste_id = client.post("/api/pastes", json=paste_body()).json()["id"]
        assert all(client.get(f"/api/pastes/{paste_id}").status_code == 200 for _ in range(5))

    def test_forwarded_for_from_trusted_proxy(self, make_client: Callable[..., TestClient]) -> None:
        client = make_client(
            RATE_LIMIT_ENABLED=True,
            RATE_LIMIT_CAPACITY=1,
            RATE_LIMIT_REFILL_PER_MINUTE=0,
            TRUSTED_PROXY_IPS=["testclient"],
        )
        first = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
        second = {"X-Forwarded-For": "198.51.100.2"}

        assert client.post("/api/pastes", json=paste_body(), headers=first).status_code == 200
        assert client.post("/api/pastes", json=paste_body(), headers=first).status_code == 429
        assert client.post("/api/pastes", json=paste_body(), headers=second).status_code == 200

    def test_forwarded_for_ignored_from_untrusted_peer(
        self, make_client: Callable[..., TestClient]
    ) -> None:
        client = make_client(
            RATE_LIMIT_ENABLED=True, RATE_LIMIT_CAPACITY=1, RATE_LIMIT_REFILL_PER_MINUTE=0
        )
        assert client.post(
            "/api/pastes", json=paste_body(), headers={"X-Forwarded-For": "203.0.113.7"}
        ).status_code == 200
        assert client.post(
            "/api/pastes", json=paste_body(), headers={"X-Forwarded-For": "198.51.100.2"}
        ).status_code == 429


def test_storage_failure_returns_db_error(make_client: Callable[..., TestClient]) -> None:
    client = make_client()

    def broken_session():
        session = MagicMock(spec=Session)
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("gone"))
        yield session

    client.app.dependency_overrides[get_db] = broken_session
    response = client.get("/api/pastes/anything")
    assert response.status_code == 500
    assert response.json() == {"error": "db_error"}

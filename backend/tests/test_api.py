"""
Test API endpoints.
"""

import json

import pytest
from fastapi.testclient import TestClient

PNG = b"\x89PNG\r\n\x1a\n fake image"


def _register(client: TestClient, email: str, name: str, password: str = "secret123"):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "fullName": name},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _upload(client: TestClient, headers, vitals=None, filename="xray.png",
            content_type="image/png", title="Chest X-Ray"):
    data = {"title": title, "report_type": "X-Ray", "report_date": "2024-03-01"}
    if vitals is not None:
        data["vitals"] = json.dumps(vitals)
    return client.post(
        "/api/v1/reports/upload",
        headers=headers,
        data=data,
        files={"file": (filename, PNG, content_type)},
    )


def test_root_endpoint(client: TestClient):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert "version" in data
    assert data["status"] == "running"


def test_health_check(client: TestClient):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data
    assert "timestamp" in data


def test_register_login_and_me(client: TestClient):
    _register(client, "Alice@Example.com", "Alice")

    response = client.post(
        "/api/v1/auth/login",
        json={"email": "alice@example.com", "password": "secret123"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "alice@example.com"


def test_duplicate_registration_is_conflict(client: TestClient):
    _register(client, "alice@example.com", "Alice")
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "ALICE@example.com", "password": "secret123", "fullName": "A"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


def test_wrong_password_is_unauthorized(client: TestClient):
    _register(client, "alice@example.com", "Alice")
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "alice@example.com", "password": "wrong-password"},
    )
    assert response.status_code == 401


def test_requests_without_token_are_rejected(client: TestClient):
    response = client.get("/api/v1/reports")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"

    response = client.get(
        "/api/v1/reports", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


def test_share_view_and_delete_flow(client: TestClient):
    alice = _register(client, "alice@example.com", "Alice")
    bob = _register(client, "bob@example.com", "Bob")

    created = _upload(
        client, alice, vitals=[{"type": "Heart Rate", "value": 72, "unit": "bpm"}]
    )
    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "created"
    report_id = body["report_id"]

    # not shared yet
    assert client.get(f"/api/v1/reports/{report_id}", headers=bob).status_code == 404

    shared = client.post(
        "/api/v1/sharing/share",
        headers=alice,
        json={"reportId": report_id, "email": "bob@example.com"},
    )
    assert shared.status_code == 201
    share_id = shared.json()["share_id"]

    duplicate = client.post(
        "/api/v1/sharing/share",
        headers=alice,
        json={"reportId": report_id, "email": "Bob@Example.com"},
    )
    assert duplicate.status_code == 409

    detail = client.get(f"/api/v1/reports/{report_id}", headers=bob)
    assert detail.status_code == 200
    assert detail.json()["capability"] == "shared_read_only"
    assert detail.json()["can_modify"] is False
    assert detail.json()["vitals"][0]["value"] == "72"

    file_response = client.get(f"/api/v1/reports/{report_id}/file", headers=bob)
    assert file_response.status_code == 200
    assert file_response.content == PNG
    assert file_response.headers["content-type"] == "image/png"

    received = client.get("/api/v1/sharing/received", headers=bob).json()["reports"]
    assert [r["share_id"] for r in received] == [share_id]
    assert received[0]["owner_name"] == "Alice"

    sent = client.get("/api/v1/sharing/sent", headers=alice).json()["shares"]
    assert sent[0]["recipient_name"] == "Bob"
    assert sent[0]["report_title"] == "Chest X-Ray"

    # read-only: no delete, no reshare
    assert client.delete(f"/api/v1/reports/{report_id}", headers=bob).status_code == 404
    reshare = client.post(
        "/api/v1/sharing/share",
        headers=bob,
        json={"reportId": report_id, "email": "carol@example.com"},
    )
    assert reshare.status_code == 404

    deleted = client.delete(f"/api/v1/reports/{report_id}", headers=alice)
    assert deleted.status_code == 200

    assert client.get(f"/api/v1/reports/{report_id}", headers=bob).status_code == 404
    assert client.get("/api/v1/sharing/received", headers=bob).json()["reports"] == []
    assert client.delete(f"/api/v1/reports/{report_id}", headers=alice).status_code == 404


def test_upload_with_bad_vital_is_partial(client: TestClient):
    alice = _register(client, "alice@example.com", "Alice")

    response = _upload(
        client,
        alice,
        title="CBC",
        vitals=[
            {"type": "Hemoglobin", "value": "13.5", "unit": "g/dL"},
            {"type": "WBC", "value": "6.1"},
            {"type": "Platelets", "value": "250", "unit": "10^3/uL"},
        ],
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "partial"
    assert [f["index"] for f in body["failed_vitals"]] == [1]
    assert len(body["vitals_saved"]) == 2

    listed = client.get("/api/v1/reports", headers=alice).json()
    assert listed["count"] == 1
    assert listed["reports"][0]["vital_count"] == 2


@pytest.mark.parametrize(
    "filename,content_type",
    [("notes.txt", "text/plain"), ("scan.png", "text/plain"), ("doc.exe", "image/png")],
)
def test_upload_rejects_disallowed_files(client: TestClient, filename, content_type):
    alice = _register(client, "alice@example.com", "Alice")
    response = _upload(client, alice, filename=filename, content_type=content_type)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_upload_rejects_malformed_vitals(client: TestClient):
    alice = _register(client, "alice@example.com", "Alice")
    response = client.post(
        "/api/v1/reports/upload",
        headers=alice,
        data={
            "title": "CBC",
            "report_type": "Blood Test",
            "report_date": "2024-03-01",
            "vitals": "{not json",
        },
        files={"file": ("cbc.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert response.status_code == 400
    assert response.json()["details"]["fields"] == ["vitals"]


def test_upload_rejects_oversized_file(client: TestClient, settings):
    alice = _register(client, "alice@example.com", "Alice")
    too_big = b"0" * (settings.max_file_size_mb * 1024 * 1024 + 1)
    response = client.post(
        "/api/v1/reports/upload",
        headers=alice,
        data={"title": "Big", "report_type": "X-Ray", "report_date": "2024-03-01"},
        files={"file": ("big.png", too_big, "image/png")},
    )
    assert response.status_code == 400


def test_search_and_vitals_endpoints(client: TestClient):
    alice = _register(client, "alice@example.com", "Alice")
    created = _upload(
        client, alice, vitals=[{"type": "Weight", "value": "70", "unit": "kg"}]
    ).json()

    added = client.post(
        "/api/v1/vitals",
        headers=alice,
        json={
            "reportId": created["report_id"],
            "vitalType": "Weight",
            "value": 72,
            "unit": "kg",
            "measuredAt": "2024-03-02T09:00:00",
        },
    )
    assert added.status_code == 201

    search = client.get(
        "/api/v1/reports/search", headers=alice, params={"vital_type": "Weight"}
    ).json()
    assert search["count"] == 1

    inverted = client.get(
        "/api/v1/reports/search",
        headers=alice,
        params={"start_date": "2024-06-01", "end_date": "2024-01-01"},
    )
    assert inverted.status_code == 400

    trend = client.get(
        "/api/v1/vitals/trends", headers=alice, params={"vital_type": "Weight"}
    ).json()["vitals"]
    assert [v["value"] for v in trend] == ["70", "72"]

    summary = client.get("/api/v1/vitals/summary", headers=alice).json()["summary"]
    assert summary[0]["count"] == 2
    assert summary[0]["latest_value"] == "72"

    vital_id = added.json()["vital"]["id"]
    assert client.delete(f"/api/v1/vitals/{vital_id}", headers=alice).status_code == 200
    listed = client.get(
        f"/api/v1/vitals/report/{created['report_id']}", headers=alice
    ).json()["vitals"]
    assert len(listed) == 1


def test_revoke_share(client: TestClient):
    alice = _register(client, "alice@example.com", "Alice")
    bob = _register(client, "bob@example.com", "Bob")
    report_id = _upload(client, alice).json()["report_id"]
    share_id = client.post(
        "/api/v1/sharing/share",
        headers=alice,
        json={"reportId": report_id, "email": "bob@example.com"},
    ).json()["share_id"]

    assert client.delete(f"/api/v1/sharing/share/{share_id}", headers=bob).status_code == 404
    assert client.get(
        f"/api/v1/sharing/report/{report_id}", headers=alice
    ).json()["shares"][0]["id"] == share_id

    assert client.delete(f"/api/v1/sharing/share/{share_id}", headers=alice).status_code == 200
    assert client.get(f"/api/v1/reports/{report_id}", headers=bob).status_code == 404


def test_update_and_visible_reports(client: TestClient):
    alice = _register(client, "alice@example.com", "Alice")
    bob = _register(client, "bob@example.com", "Bob")
    report_id = _upload(client, alice).json()["report_id"]
    client.post(
        "/api/v1/sharing/share",
        headers=alice,
        json={"reportId": report_id, "email": "bob@example.com"},
    )

    patched = client.patch(
        f"/api/v1/reports/{report_id}", headers=alice, json={"notes": "No findings"}
    )
    assert patched.status_code == 200
    assert patched.json()["notes"] == "No findings"

    denied = client.patch(
        f"/api/v1/reports/{report_id}", headers=bob, json={"notes": "edited"}
    )
    assert denied.status_code == 404

    visible = client.get("/api/v1/reports/visible", headers=bob).json()
    assert [r["id"] for r in visible["reports"]] == [report_id]


def test_delete_account(client: TestClient, upload_dir):
    alice = _register(client, "alice@example.com", "Alice")
    _upload(client, alice)
    assert len(list(upload_dir.iterdir())) == 1

    deleted = client.delete("/api/v1/auth/me", headers=alice)
    assert deleted.status_code == 200
    assert list(upload_dir.iterdir()) == []

    login = client.post(
        "/api/v1/auth/login",
        json={"email": "alice@example.com", "password": "secret123"},
    )
    assert login.status_code == 401

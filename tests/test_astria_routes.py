from __future__ import annotations

from fakes import ALICE, BOB
from headshots.config.settings import settings
from headshots.main import app
from headshots.modules.astria.media import encode_data_url
from headshots.modules.astria.routes import get_astria_client


def _selfies(count: int):
    return [("files", (f"selfie_{i}.jpg", b"\xff\xd8" + bytes([i]) * 64, "image/jpeg")) for i in range(count)]


def test_missing_bearer_token_is_unauthorized(client, astria):
    response = client.post("/api/v1/astria", json={"action": "check-status"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized"
    assert astria.requests == []


def test_invalid_token_is_unauthorized(client):
    response = client.post(
        "/api/v1/astria",
        json={"action": "check-status"},
        headers={"Authorization": "Bearer forged"},
    )

    assert response.status_code == 401


def test_unknown_action_is_rejected(client, alice_headers):
    response = client.post("/api/v1/astria", json={"action": "train-everything"}, headers=alice_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid action: train-everything"


def test_malformed_body_is_rejected(client, alice_headers):
    response = client.post(
        "/api/v1/astria",
        content=b"{not json",
        headers={**alice_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request body"


def test_upload_action_in_body(client, alice_headers, astria):
    astria.respond("POST", "/images", json={"id": 11})

    response = client.post(
        "/api/v1/astria",
        json={"action": "upload-images", "image": encode_data_url(b"\xff\xd8abc"), "filename": "a.jpg"},
        headers=alice_headers,
    )

    assert response.status_code == 200
    assert response.json()["id"] == "11"
    assert response.json()["simulated"] is False


def test_create_tune_action_in_path_falls_back_when_astria_fails(client, alice_headers, supabase):
    response = client.post(
        "/api/v1/astria/create-tune",
        json={"imageIds": ["1", "2", "3"]},
        headers=alice_headers,
    )

    body = response.json()
    assert response.status_code == 200
    assert body["id"].startswith("tune-")
    assert body["simulated"] is True
    assert supabase.rows("user_tunes")[0]["tune_id"] == body["id"]


def test_check_status_reports_ledger_when_nothing_changed(client, alice_headers, astria, supabase):
    astria.respond("GET", "/tunes/314", json={"id": 314, "status": "training"})
    supabase.table("user_tunes").insert({"user_id": ALICE["id"], "tune_id": "314", "status": "training"}).execute()

    response = client.post("/api/v1/astria/check-status", json={"tuneId": "314"}, headers=alice_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "training"


def test_upload_batch_needs_three_files(client, alice_headers, astria):
    response = client.post("/api/v1/astria/uploads", files=_selfies(2), headers=alice_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload at least 3 images for best results"
    assert astria.requests == []


def test_upload_batch_with_no_files(client, alice_headers):
    response = client.post("/api/v1/astria/uploads", headers=alice_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please select at least one image"


def test_upload_batch_counts_simulated_ids(client, alice_headers, astria):
    astria.respond("POST", "/images", status_code=500, json={"error": "storage down"})

    response = client.post("/api/v1/astria/uploads", files=_selfies(3), headers=alice_headers)

    body = response.json()
    assert response.status_code == 200
    assert len(body["image_ids"]) == 3
    assert body["simulated_count"] == 3
    assert len(astria.requests) == 3


def test_missing_api_key_is_server_error(client, alice_headers, monkeypatch):
    app.dependency_overrides.pop(get_astria_client)
    monkeypatch.setattr(settings, "astria_api_key", None)

    response = client.post("/api/v1/astria", json={"action": "check-status"}, headers=alice_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "API key not configured"


def test_generate_with_another_users_tune_is_forbidden(client, alice_headers, astria, supabase):
    supabase.table("user_tunes").insert({"user_id": BOB["id"], "tune_id": "888", "status": "complete"}).execute()

    response = client.post(
        "/api/v1/astria",
        json={"action": "generate-headshots", "prompt": "a studio portrait", "tuneId": "888"},
        headers=alice_headers,
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Unauthorized model access"
    assert astria.requests == []
    assert supabase.rows("user_headshots") == []


def test_check_status_on_another_users_tune_is_forbidden(client, alice_headers, bob_headers, supabase):
    supabase.table("user_tunes").insert({"user_id": BOB["id"], "tune_id": "tune-1000", "status": "training"}).execute()

    response = client.post("/api/v1/astria/check-status", json={"tuneId": "tune-1000"}, headers=alice_headers)
    own = client.post("/api/v1/astria/check-status", json={"tuneId": "tune-1000"}, headers=bob_headers)

    assert response.status_code == 403
    assert own.status_code == 200
    assert own.json()["status"] == "complete"
    assert supabase.rows("user_tunes")[0]["status"] == "complete"

from __future__ import annotations

import pytest

from fakes import ALICE, BOB


@pytest.fixture
def alice_model(supabase):
    return supabase.table("models").insert({
        "user_id": ALICE["id"], "modelid": "777", "name": "Alice v1", "status": "completed", "type": "headshot",
    }).execute().data[0]


@pytest.fixture
def bob_model(supabase):
    return supabase.table("models").insert({
        "user_id": BOB["id"], "modelid": "888", "name": "Bob v1", "status": "completed", "type": "headshot",
    }).execute().data[0]


def test_train_needs_ten_images(client, alice_headers, astria, supabase):
    response = client.post(
        "/api/v1/tunes/train", json={"image_ids": [str(i) for i in range(9)]}, headers=alice_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload at least 10 images to train your model"
    assert astria.requests == []
    assert supabase.rows("models") == []


def test_train_records_model_and_samples(client, alice_headers, astria, supabase):
    astria.respond("POST", "/tunes", json={"id": 9001})
    image_ids = [str(100 + i) for i in range(10)]

    response = client.post(
        "/api/v1/tunes/train", json={"image_ids": image_ids, "name": "Spring"}, headers=alice_headers
    )

    body = response.json()
    assert response.status_code == 201
    assert body["tune_id"] == "9001"
    assert body["simulated"] is False
    assert body["polling"] is False
    assert body["model"]["status"] == "training"
    assert body["model"]["name"] == "Spring"
    assert [s["uri"] for s in supabase.rows("samples")] == image_ids
    assert {s["modelid"] for s in supabase.rows("samples")} == {body["model"]["id"]}
    assert supabase.rows("user_tunes")[0]["tune_id"] == "9001"


def test_list_tunes_only_returns_own_models(client, alice_headers, alice_model, bob_model):
    response = client.get("/api/v1/tunes", headers=alice_headers)

    assert response.status_code == 200
    assert [m["id"] for m in response.json()] == [alice_model["id"]]


def test_get_foreign_model_is_forbidden(client, alice_headers, bob_model):
    response = client.get(f"/api/v1/tunes/{bob_model['id']}", headers=alice_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Unauthorized model access"


def test_get_unknown_model_is_not_found(client, alice_headers):
    response = client.get("/api/v1/tunes/does-not-exist", headers=alice_headers)

    assert response.status_code == 404


@pytest.mark.parametrize("payload, detail", [
    ({"prompt": "too short", "num_images": 4}, "Prompt must be at least 10 characters"),
    ({"prompt": "a corporate headshot", "num_images": 0}, "Number of images must be between 1 and 8"),
    ({"prompt": "a corporate headshot", "num_images": 9}, "Number of images must be between 1 and 8"),
])
def test_generate_rejects_bad_input_before_calling_astria(client, alice_headers, astria, alice_model, payload, detail):
    response = client.post(f"/api/v1/tunes/{alice_model['id']}/generate", json=payload, headers=alice_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == detail
    assert astria.requests == []


def test_generate_on_foreign_model_is_forbidden(client, alice_headers, astria, bob_model, supabase):
    response = client.post(
        f"/api/v1/tunes/{bob_model['id']}/generate",
        json={"prompt": "a corporate headshot", "num_images": 2},
        headers=alice_headers,
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Unauthorized model access"
    assert astria.requests == []
    assert supabase.rows("images") == []


def test_generate_stores_images_against_model(client, alice_headers, astria, alice_model, supabase):
    astria.respond("POST", "/tunes/1504944/prompts", json={"id": 31, "images": ["https://cdn.test/a.png"]})

    response = client.post(
        f"/api/v1/tunes/{alice_model['id']}/generate",
        json={"prompt": "  a corporate headshot  ", "num_images": 1, "style_type": "professional"},
        headers=alice_headers,
    )

    body = response.json()
    assert response.status_code == 200
    assert body["modelid"] == alice_model["id"]
    assert body["images"] == ["https://cdn.test/a.png"]
    assert body["simulated"] is False
    assert b"%3Clora%3A777%3A1%3E+a+corporate+headshot%2C" in astria.requests[0].content
    assert [(i["modelid"], i["uri"]) for i in supabase.rows("images")] == [(alice_model["id"], "https://cdn.test/a.png")]

    gallery = client.get(f"/api/v1/tunes/{alice_model['id']}/images", headers=alice_headers).json()
    assert [i["uri"] for i in gallery] == ["https://cdn.test/a.png"]
    everything = client.get("/api/v1/images", headers=alice_headers).json()
    assert len(everything) == 1


def test_generate_falls_back_to_placeholders(client, alice_headers, alice_model):
    response = client.post(
        f"/api/v1/tunes/{alice_model['id']}/generate",
        json={"prompt": "a corporate headshot", "num_images": 2},
        headers=alice_headers,
    )

    body = response.json()
    assert response.status_code == 200
    assert body["simulated"] is True
    assert body["prompt_id"].startswith("prompt-")
    assert len(body["images"]) == 2


def test_overview_counts(client, alice_headers, alice_model, supabase):
    supabase.table("models").insert({"user_id": ALICE["id"], "modelid": "778", "status": "training"}).execute()
    supabase.table("images").insert({"modelid": alice_model["id"], "uri": "https://cdn.test/x.png"}).execute()

    response = client.get("/api/v1/tunes/overview", headers=alice_headers)

    assert response.json() == {"total_models": 2, "completed_models": 1, "training_models": 1, "total_images": 1}

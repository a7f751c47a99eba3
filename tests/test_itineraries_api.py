import uuid

import pytest

ITINERARY = {
    "title": "Annapurna Circuit",
    "location": "Annapurna, Nepal",
    "content": "### Day 1: Besisahar to Chame\n- Start: Besisahar",
    "filters": {"difficulty": "challenging"},
}


@pytest.fixture
def saved(client, auth):
    response = client.post("/api/itineraries/", json=ITINERARY, headers=auth)
    assert response.status_code == 201
    return response.json()


def test_requires_token(client):
    assert client.get("/api/itineraries/").status_code == 401


def test_create(saved):
    assert saved["title"] == "Annapurna Circuit"
    assert saved["type"] == "custom"
    assert saved["filters"] == {"difficulty": "challenging"}


def test_create_validates_body(client, auth):
    response = client.post("/api/itineraries/", json={"title": "No content"}, headers=auth)
    assert response.status_code == 422


def test_list_only_own(client, auth, other_auth, saved):
    client.post("/api/itineraries/", json={**ITINERARY, "title": "Theirs"}, headers=other_auth)

    mine = client.get("/api/itineraries/", headers=auth).json()
    assert [i["title"] for i in mine] == ["Annapurna Circuit"]


def test_get(client, auth, saved):
    response = client.get(f"/api/itineraries/{saved['id']}", headers=auth)

    assert response.status_code == 200
    assert response.json()["content"] == ITINERARY["content"]


def test_get_other_users_itinerary(client, other_auth, saved):
    response = client.get(f"/api/itineraries/{saved['id']}", headers=other_auth)
    assert response.status_code == 404


def test_get_missing(client, auth):
    assert client.get(f"/api/itineraries/{uuid.uuid4()}", headers=auth).status_code == 404


def test_get_malformed_id(client, auth):
    assert client.get("/api/itineraries/not-a-uuid", headers=auth).status_code == 422


def test_update(client, auth, saved):
    response = client.put(
        f"/api/itineraries/{saved['id']}",
        json={"title": "Annapurna in 12 days", "comments": "Add a rest day"},
        headers=auth,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Annapurna in 12 days"
    assert body["comments"] == "Add a rest day"
    assert body["content"] == ITINERARY["content"]


def test_update_other_users_itinerary(client, other_auth, saved):
    response = client.put(f"/api/itineraries/{saved['id']}", json={"title": "Mine now"}, headers=other_auth)
    assert response.status_code == 404


def test_delete(client, auth, saved):
    response = client.delete(f"/api/itineraries/{saved['id']}", headers=auth)

    assert response.status_code == 200
    assert response.json() == {"message": "Itinerary deleted successfully"}
    assert client.get(f"/api/itineraries/{saved['id']}", headers=auth).status_code == 404


def test_delete_other_users_itinerary(client, auth, other_auth, saved):
    assert client.delete(f"/api/itineraries/{saved['id']}", headers=other_auth).status_code == 404
    assert client.get(f"/api/itineraries/{saved['id']}", headers=auth).status_code == 200

def test_profile_created_on_first_call(client, auth, fake_store):
    response = client.get("/api/users/profile", headers=auth)

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "hiker@example.com"
    assert body["first_name"] == "Ada"
    assert body["last_name"] == "Hiker"
    assert body["subscription_status"] == "free"
    assert len(fake_store.users) == 1


def test_profile_requires_token(client):
    assert client.get("/api/users/profile").status_code == 401


def test_update_profile(client, auth, identity):
    response = client.put(
        "/api/users/profile",
        json={"firstName": "Ada", "lastName": "Lovelace", "preferences": {"dark_mode": True}},
        headers=auth,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["last_name"] == "Lovelace"
    assert body["preferences"]["dark_mode"] is True
    assert identity.renamed == [("uid-hiker", "Ada Lovelace")]


def test_update_preferences_only_skips_rename(client, auth, identity):
    response = client.put(
        "/api/users/profile",
        json={"preferences": {"default_difficulty": "easy"}},
        headers=auth,
    )

    assert response.status_code == 200
    assert response.json()["preferences"]["default_difficulty"] == "easy"
    assert identity.renamed == []


def test_update_profile_rejects_unknown_preference(client, auth):
    response = client.put(
        "/api/users/profile",
        json={"preferences": {"default_difficulty": "extreme"}},
        headers=auth,
    )
    assert response.status_code == 422


def test_subscription_summary(client, auth):
    body = client.get("/api/users/subscription", headers=auth).json()

    assert body["status"] == "free"
    assert body["startDate"] is not None
    assert body["endDate"] is None


def test_delete_account(client, auth, other_auth, fake_store, identity):
    client.post("/api/finalize", json={"location": "Nepal", "filters": {}}, headers=auth)
    client.post("/api/finalize", json={"location": "Peru", "filters": {}}, headers=other_auth)

    response = client.delete("/api/users/account", headers=auth)

    assert response.status_code == 200
    assert identity.deleted == ["uid-hiker"]
    assert [u.firebase_uid for u in fake_store.users.values()] == ["uid-other"]
    assert [i.location for i in fake_store.itineraries.values()] == ["Peru"]

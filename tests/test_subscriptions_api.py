import json

import stripe


def _subscribe(fake_store):
    user = next(iter(fake_store.users.values()))
    user.subscription_status = "premium"
    user.stripe_customer_id = "cus_123"
    user.stripe_subscription_id = "sub_123"
    return user


def test_plans_are_public(client):
    response = client.get("/api/subscriptions/plans")

    assert response.status_code == 200
    assert set(response.json()) == {"basic", "pro"}


def test_checkout_session(client, auth, fake_stripe):
    response = client.post(
        "/api/subscriptions/create-checkout-session",
        json={"priceId": "price_pro_monthly", "billingInterval": "monthly"},
        headers={**auth, "Origin": "https://app.example.com"},
    )

    assert response.status_code == 200
    assert response.json()["sessionId"] == "cs_123"
    _, _, kwargs = fake_stripe.called("checkout.Session.create")[0]
    assert kwargs["success_url"].startswith("https://app.example.com/")


def test_checkout_session_requires_price(client, auth):
    response = client.post("/api/subscriptions/create-checkout-session", json={}, headers=auth)
    assert response.status_code == 422


def test_checkout_session_stripe_failure(client, auth, fake_stripe):
    fake_stripe.fail(fake_stripe.Customer, "create", stripe.APIConnectionError("network down"))

    response = client.post(
        "/api/subscriptions/create-checkout-session",
        json={"priceId": "price_pro_monthly"},
        headers=auth,
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to create checkout session"


def test_webhook_rejects_bad_signature(client):
    response = client.post(
        "/api/subscriptions/webhook",
        content=b"{}",
        headers={"stripe-signature": "forged"},
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Webhook Error:")


def test_webhook_checkout_completed(client, auth, fake_store):
    client.get("/api/users/profile", headers=auth)
    user = next(iter(fake_store.users.values()))
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"mode": "subscription", "subscription": "sub_123", "metadata": {"userId": str(user.id)}}},
    }

    response = client.post(
        "/api/subscriptions/webhook",
        content=json.dumps(event).encode(),
        headers={"stripe-signature": "valid"},
    )

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert user.is_premium


def test_webhook_handler_failure(client):
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"mode": "subscription", "subscription": "sub_123", "metadata": {}}},
    }

    response = client.post(
        "/api/subscriptions/webhook",
        content=json.dumps(event).encode(),
        headers={"stripe-signature": "valid"},
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to process webhook"


def test_current_subscription(client, auth):
    body = client.get("/api/subscriptions/current", headers=auth).json()

    assert body["status"] == "free"
    assert body["formattedInterval"] == "monthly"


def test_cancel_without_subscription(client, auth):
    response = client.post("/api/subscriptions/cancel", headers=auth)

    assert response.status_code == 400
    assert response.json()["detail"] == "No active subscription found"


def test_cancel_and_reactivate(client, auth, fake_store, fake_stripe):
    client.get("/api/users/profile", headers=auth)
    _subscribe(fake_store)

    assert client.post("/api/subscriptions/cancel", headers=auth).status_code == 200

    fake_stripe.subscription["cancel_at_period_end"] = True
    response = client.post("/api/subscriptions/reactivate", headers=auth)
    assert response.json() == {"message": "Subscription reactivated successfully"}


def test_change_plan(client, auth, fake_store):
    client.get("/api/users/profile", headers=auth)
    _subscribe(fake_store)

    response = client.post("/api/subscriptions/change-plan", json={"newPriceId": "price_pro_annual"}, headers=auth)

    assert response.status_code == 200
    assert response.json() == {"message": "Subscription updated successfully"}


def test_cancel_immediately(client, auth, fake_store):
    client.get("/api/users/profile", headers=auth)
    user = _subscribe(fake_store)

    response = client.post("/api/subscriptions/cancel-immediately", headers=auth)

    assert response.status_code == 200
    assert user.subscription_status == "free"


def test_customer_portal(client, auth, fake_store, fake_stripe):
    client.get("/api/users/profile", headers=auth)
    _subscribe(fake_store)

    response = client.get(
        "/api/subscriptions/customer-portal",
        params={"returnUrl": "https://app.example.com/account"},
        headers=auth,
    )

    assert response.json() == {"url": "https://billing.stripe.test/p"}
    _, _, kwargs = fake_stripe.called("billing_portal.Session.create")[0]
    assert kwargs["return_url"] == "https://app.example.com/account"


def test_customer_portal_without_customer(client, auth):
    response = client.get("/api/subscriptions/customer-portal", headers=auth)
    assert response.status_code == 400

"""
E2E tests for payer and donor personas through the full HTTP stack.

Personas:
- trusted payer: small USD card charges from a regular mailbox, always Stripe
- fraudulent payer: disposable mailbox, test token, high-risk currency, always blocked
- foreign payer: small charge in a foreign currency, flagged but not blocked
- monthly donor: subscribes, gets billed on schedule, then cancels
"""

import pytest
from fastapi.testclient import TestClient


@pytest.mark.integration
def test_trusted_payer_always_routes_to_stripe(client: TestClient):
    """
    trusted payer: repeated $4.99 charges
    Expected: every charge succeeds on Stripe with no risk factors
    """
    for _ in range(10):
        response = client.post(
            "/v1/charge",
            json={"amount": 499, "currency": "USD", "source": "tok_visa", "email": "dana@outlook.com"},
        )
        data = response.json()
        assert data["provider"] == "stripe", "small USD charges from a clean mailbox should use Stripe"
        assert data["status"] == "success"

    stats = client.get("/v1/transactions/stats").json()
    assert stats["total"] == 10
    assert stats["provider_breakdown"] == {"stripe": 10}
    assert stats["average_risk_score"] < 0.3


@pytest.mark.integration
def test_fraudulent_payer_is_blocked_with_reasons(client: TestClient):
    """
    fraudulent payer: every red flag at once
    Expected: blocked, explanation names the signals, ledger keeps the factors
    """
    response = client.post(
        "/v1/charge",
        json={"amount": 250_000, "currency": "CNY", "source": "tok_test_4242", "email": "x@mailinator.com"},
    )

    data = response.json()
    assert data["status"] == "blocked"
    assert "large amount" in data["explanation"]

    transaction = client.get(f"/v1/transactions/{data['transaction_id']}").json()
    assert transaction["risk_factors"] == [
        "large amount",
        "suspicious email domain",
        "non-USD currency",
        "test payment source",
    ]

    blocked = client.get("/v1/transactions", params={"provider": "blocked"}).json()
    assert blocked["count"] == 1


@pytest.mark.integration
def test_foreign_payer_flagged_for_currency(client: TestClient):
    """
    foreign payer: €80 charge
    Expected: not blocked, currency recorded as a risk factor
    """
    response = client.post(
        "/v1/charge",
        json={"amount": 8_000, "currency": "eur", "source": "tok_mastercard", "email": "jan@web.de"},
    )

    data = response.json()
    assert data["status"] == "success"
    assert data["provider"] in {"stripe", "paypal"}

    transaction = client.get(f"/v1/transactions/{data['transaction_id']}").json()
    assert transaction["currency"] == "EUR"
    assert transaction["risk_factors"] == ["non-USD currency"]


@pytest.mark.integration
def test_monthly_donor_lifecycle(client: TestClient, clock):
    """
    monthly donor: subscribes, is billed twice, then cancels
    Expected: one charge per elapsed month, nothing after cancellation
    """
    created = client.post(
        "/v1/subscriptions",
        json={
            "donor_id": "donor_maria",
            "amount": 2_000,
            "currency": "USD",
            "interval": "monthly",
            "campaign_description": "Food and school supplies for kids in Haiti",
        },
    )
    assert created.status_code == 201
    assert created.json()["tags"] == ["food aid", "children", "education", "haiti"]

    for _ in range(2):
        clock.advance(days=31)
        sweep = client.post("/v1/subscriptions/process-charges").json()
        assert sweep["succeeded"] == 1

    assert client.post("/v1/subscriptions/process-charges").json()["due"] == 0

    assert client.delete("/v1/subscriptions/donor_maria").status_code == 200
    clock.advance(days=62)
    assert client.post("/v1/subscriptions/process-charges").json()["due"] == 0

    history = client.get("/v1/subscription-transactions/donor_maria").json()
    assert history["count"] == 2
    assert {t["status"] for t in history["transactions"]} == {"success"}

    stats = client.get("/v1/subscriptions/stats").json()
    assert stats["total_active"] == 0
    assert stats["total_cancelled"] == 1
    assert stats["monthly_recurring_revenue"] == 0

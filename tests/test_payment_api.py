"""
Tests through the HTTP entry facade.
"""

import pytest
from sqlalchemy import func, select

from services.payment_service.events import PaymentApproved, PaymentFailed
from services.payment_service.models import Payment


async def count_payments(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(Payment))
    return result.scalar_one()


class TestCreatePaymentEndpoint:

    @pytest.mark.integration
    async def test_scenario_stripe_approves(self, client, payment_data, event_bus, recorder):
        response = await client.post("/", json=payment_data)
        await event_bus.drain()

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "APPROVED"
        # Amounts are rendered as fixed-point strings
        assert body["amount"] == "100.50"
        assert body["currency"] == "BRL"
        assert body["method"] == "CREDIT_CARD"
        assert body["provider"] == "Stripe"

        [event] = recorder.events
        assert isinstance(event, PaymentApproved)
        assert event.payment_id == body["id"]

    @pytest.mark.integration
    async def test_scenario_paypal_declines_is_still_a_success_response(
        self, client, payment_data, event_bus, recorder
    ):
        response = await client.post("/", json={**payment_data, "provider": "Paypal"})
        await event_bus.drain()

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "FAILED"
        assert body["failure_reason"] == "Transaction refused by Paypal"

        [event] = recorder.events
        assert isinstance(event, PaymentFailed)
        assert (event.payment_id, event.provider) == (body["id"], "Paypal")

    @pytest.mark.integration
    async def test_scenario_unknown_provider(self, client, payment_data, event_bus, recorder, db_session):
        response = await client.post("/", json={**payment_data, "provider": "Unknown"})
        await event_bus.drain()

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "provider_not_found"
        assert recorder.events == []
        assert await count_payments(db_session) == 0

    @pytest.mark.integration
    async def test_scenario_negative_amount(self, client, payment_data, event_bus, recorder, db_session):
        response = await client.post("/", json={**payment_data, "amount": -5})
        await event_bus.drain()

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "invalid_amount"
        assert detail["field"] == "amount"
        assert recorder.events == []
        assert await count_payments(db_session) == 0

    @pytest.mark.integration
    async def test_amount_too_large_for_storage(self, client, payment_data, event_bus, recorder, db_session):
        response = await client.post("/", json={**payment_data, "amount": 10_000_000_000})
        await event_bus.drain()

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_amount"
        assert recorder.events == []
        assert await count_payments(db_session) == 0

    @pytest.mark.integration
    async def test_unsupported_currency(self, client, payment_data):
        response = await client.post("/", json={**payment_data, "currency": "JPY"})

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_currency"

    @pytest.mark.integration
    async def test_malformed_body_is_rejected(self, client):
        response = await client.post("/", json={"amount": "lots", "currency": "BRL"})
        assert response.status_code == 422

    @pytest.mark.integration
    async def test_requires_internal_api_key(self, client, payment_data):
        response = await client.post("/", json=payment_data, headers={"X-Internal-API-Key": "wrong"})

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "invalid_api_key"


class TestReadPaymentEndpoint:

    @pytest.mark.integration
    async def test_read_returns_what_create_returned(self, client, payment_data):
        created = (await client.post("/", json=payment_data)).json()

        response = await client.get(f"/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.integration
    async def test_unknown_id_is_not_found(self, client):
        response = await client.get("/6c1b1a3e-0000-4000-8000-000000000000")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "payment_not_found"


class TestSupportEndpoints:

    @pytest.mark.integration
    async def test_health_is_public(self, client):
        response = await client.get("/health", headers={"X-Internal-API-Key": ""})

        assert response.status_code == 200
        assert response.json() == {"service": "payment", "status": "running"}

    @pytest.mark.integration
    async def test_lists_registered_providers(self, client):
        response = await client.get("/providers")

        assert response.status_code == 200
        assert response.json() == {"providers": ["Paypal", "Stripe"]}

    @pytest.mark.integration
    async def test_reconciliation_sweep_with_nothing_pending(self, client, payment_data):
        await client.post("/", json=payment_data)

        response = await client.post("/reconciliation/sweep")

        assert response.status_code == 200
        assert response.json() == {"resolved": 0, "payment_ids": []}

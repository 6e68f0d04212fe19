"""
Payment prepare/confirm flow against a fake payment processor
"""

import pytest
from sqlalchemy import func
from sqlalchemy.future import select

from freight.core.enums import PaymentStatus
from freight.core.errors import unavailable
from freight.models.payment import Payment


@pytest.fixture
async def paid_match(shipper, make_quote, make_match):
    quote = await make_quote(shipper)
    return await make_match(shipper, quote.id)


async def _prepare(client, headers, principal, match_id, amount=56100, **extra):
    return await client.post(
        "/payments/prepare",
        json={"match_id": match_id, "amount": amount, **extra},
        headers=headers(principal),
    )


async def _confirm(client, headers, principal, order_id, amount=56100, payment_key="pk_test_1"):
    return await client.post(
        "/payments/confirm",
        json={"payment_key": payment_key, "order_id": order_id, "amount": amount},
        headers=headers(principal),
    )


async def _stored(session_factory, payment_id):
    async with session_factory() as session:
        res = await session.execute(select(Payment).where(Payment.id == payment_id))
        return res.scalars().first()


@pytest.mark.payments
class TestPreparePayment:

    @pytest.mark.asyncio
    async def test_prepare(self, client, session_factory, shipper, headers, paid_match):
        response = await _prepare(client, headers, shipper, paid_match.id)

        assert response.status_code == 200
        body = response.json()
        assert body["order_id"].startswith("FRT-")
        assert len(body["order_id"]) == 20
        assert body["amount"] == 56100
        assert body["order_name"] == "Freight payment"
        assert body["client_key"] == "test_ck_freight"

        stored = await _stored(session_factory, body["payment_id"])
        assert stored.status == PaymentStatus.PENDING
        assert stored.total_amount == 56100
        assert stored.order_no == body["order_id"]

    @pytest.mark.asyncio
    async def test_custom_order_name(self, client, shipper, headers, paid_match):
        response = await _prepare(client, headers, shipper, paid_match.id, order_name="Seoul to Incheon")
        assert response.json()["order_name"] == "Seoul to Incheon"

    @pytest.mark.asyncio
    async def test_gateway_not_configured(self, client, shipper, headers, paid_match, fake_gateway):
        fake_gateway.configured = False
        response = await _prepare(client, headers, shipper, paid_match.id)
        assert response.status_code == 503
        assert response.json()["kind"] == "external_service_unavailable"

    @pytest.mark.asyncio
    async def test_only_owner_prepares(self, client, other_shipper, driver, headers, paid_match):
        assert (await _prepare(client, headers, other_shipper, paid_match.id)).status_code == 403
        assert (await _prepare(client, headers, driver, paid_match.id)).status_code == 403

    @pytest.mark.asyncio
    async def test_amount_must_be_positive(self, client, shipper, headers, paid_match):
        response = await _prepare(client, headers, shipper, paid_match.id, amount=0)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_idempotent_prepare(self, client, session_factory, shipper, headers, paid_match, fake_redis):
        request_headers = {**headers(shipper), "Idempotency-Key": "prep-1"}
        first = await client.post(
            "/payments/prepare", json={"match_id": paid_match.id, "amount": 56100}, headers=request_headers
        )
        second = await client.post(
            "/payments/prepare", json={"match_id": paid_match.id, "amount": 56100}, headers=request_headers
        )

        assert first.json() == second.json()
        async with session_factory() as session:
            res = await session.execute(select(func.count(Payment.id)).where(Payment.match_id == paid_match.id))
            assert res.scalar() == 1

    @pytest.mark.asyncio
    async def test_idempotency_key_does_not_leak_across_shippers(
        self, client, shipper, other_shipper, headers, paid_match, make_quote, make_match, fake_redis
    ):
        first = await client.post(
            "/payments/prepare",
            json={"match_id": paid_match.id, "amount": 56100},
            headers={**headers(shipper), "Idempotency-Key": "k1"},
        )
        assert first.status_code == 200

        stolen = await client.post(
            "/payments/prepare",
            json={"match_id": paid_match.id, "amount": 1},
            headers={**headers(other_shipper), "Idempotency-Key": "k1"},
        )
        assert stolen.status_code == 403
        assert "payment_id" not in stolen.json()

        own_match = await make_match(other_shipper, (await make_quote(other_shipper)).id)
        own = await client.post(
            "/payments/prepare",
            json={"match_id": own_match.id, "amount": 56100},
            headers={**headers(other_shipper), "Idempotency-Key": "k1"},
        )
        assert own.status_code == 200
        assert own.json()["payment_id"] != first.json()["payment_id"]
        assert own.json()["order_id"] != first.json()["order_id"]


@pytest.mark.payments
class TestConfirmPayment:

    @pytest.mark.asyncio
    async def test_confirm(self, client, session_factory, shipper, headers, paid_match, fake_gateway):
        prepared = (await _prepare(client, headers, shipper, paid_match.id)).json()

        response = await _confirm(client, headers, shipper, prepared["order_id"])

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "COMPLETED"
        assert body["pg_ref"] == "pk_test_1"
        assert body["paid_at"] is not None
        assert fake_gateway.calls == [("pk_test_1", prepared["order_id"], 56100)]

    @pytest.mark.asyncio
    async def test_second_confirm_conflicts(self, client, shipper, headers, paid_match, fake_gateway):
        prepared = (await _prepare(client, headers, shipper, paid_match.id)).json()
        await _confirm(client, headers, shipper, prepared["order_id"])

        response = await _confirm(client, headers, shipper, prepared["order_id"])
        assert response.status_code == 409
        assert len(fake_gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_amount_mismatch_fails_once(self, client, session_factory, shipper, headers, paid_match, fake_gateway):
        prepared = (await _prepare(client, headers, shipper, paid_match.id)).json()

        response = await _confirm(client, headers, shipper, prepared["order_id"], amount=1000)
        assert response.status_code == 400
        assert fake_gateway.calls == []
        assert (await _stored(session_factory, prepared["payment_id"])).status == PaymentStatus.FAILED

        # a failed payment stays failed, even with the right amount
        response = await _confirm(client, headers, shipper, prepared["order_id"])
        assert response.status_code == 409
        assert (await _stored(session_factory, prepared["payment_id"])).status == PaymentStatus.FAILED

    @pytest.mark.asyncio
    async def test_gateway_not_done(self, client, session_factory, shipper, headers, paid_match, fake_gateway):
        fake_gateway.status = "ABORTED"
        prepared = (await _prepare(client, headers, shipper, paid_match.id)).json()

        response = await _confirm(client, headers, shipper, prepared["order_id"])
        assert response.status_code == 503
        assert (await _stored(session_factory, prepared["payment_id"])).status == PaymentStatus.FAILED

    @pytest.mark.asyncio
    async def test_gateway_down(self, client, session_factory, shipper, headers, paid_match, fake_gateway):
        prepared = (await _prepare(client, headers, shipper, paid_match.id)).json()
        fake_gateway.error = unavailable("Payment gateway timed out.")

        response = await _confirm(client, headers, shipper, prepared["order_id"])
        assert response.status_code == 503
        assert (await _stored(session_factory, prepared["payment_id"])).status == PaymentStatus.FAILED

    @pytest.mark.asyncio
    async def test_unknown_order(self, client, shipper, headers):
        response = await _confirm(client, headers, shipper, "FRT-DOESNOTEXIST")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_other_shipper_cannot_confirm(self, client, shipper, other_shipper, headers, paid_match, fake_gateway):
        prepared = (await _prepare(client, headers, shipper, paid_match.id)).json()

        response = await _confirm(client, headers, other_shipper, prepared["order_id"])
        assert response.status_code == 403
        assert fake_gateway.calls == []


@pytest.mark.payments
class TestPaymentRecords:

    @pytest.mark.asyncio
    async def test_manual_payment(self, client, shipper, headers, paid_match):
        response = await client.post(
            "/payments/", json={"match_id": paid_match.id, "method": "TRANSFER"}, headers=headers(shipper)
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["method"] == "TRANSFER"
        assert body["order_no"].startswith("ORD-")

    @pytest.mark.asyncio
    async def test_manual_payment_keeps_order_no(self, client, shipper, headers, paid_match):
        response = await client.post(
            "/payments/", json={"match_id": paid_match.id, "order_no": "INV-2026-001"}, headers=headers(shipper)
        )
        assert response.json()["order_no"] == "INV-2026-001"
        assert response.json()["method"] == "CARD"

    @pytest.mark.asyncio
    async def test_duplicate_order_no_conflicts(self, client, session_factory, shipper, headers, paid_match):
        payload = {"match_id": paid_match.id, "order_no": "DUP"}
        first = await client.post("/payments/", json=payload, headers=headers(shipper))
        second = await client.post("/payments/", json=payload, headers=headers(shipper))

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["kind"] == "conflict"
        async with session_factory() as session:
            res = await session.execute(select(func.count(Payment.id)).where(Payment.order_no == "DUP"))
            assert res.scalar() == 1

    @pytest.mark.asyncio
    async def test_reads(self, client, shipper, other_shipper, headers, paid_match):
        prepared = (await _prepare(client, headers, shipper, paid_match.id)).json()
        await client.post("/payments/", json={"match_id": paid_match.id}, headers=headers(shipper))

        mine = await client.get("/payments/", headers=headers(shipper))
        assert len(mine.json()) == 2
        assert (await client.get("/payments/", headers=headers(other_shipper))).json() == []

        by_match = await client.get(f"/payments/match/{paid_match.id}", headers=headers(shipper))
        assert len(by_match.json()) == 2

        one = await client.get(f"/payments/{prepared['payment_id']}", headers=headers(shipper))
        assert one.json()["order_no"] == prepared["order_id"]

        assert (await client.get(f"/payments/{prepared['payment_id']}", headers=headers(other_shipper))).status_code == 403
        assert (await client.get(f"/payments/match/{paid_match.id}", headers=headers(other_shipper))).status_code == 403
        assert (await client.get("/payments/9999", headers=headers(shipper))).status_code == 404

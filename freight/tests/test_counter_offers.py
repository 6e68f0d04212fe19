import pytest
from sqlalchemy import func
from sqlalchemy.future import select

from freight.core.enums import NotificationType, QuoteStatus
from freight.models.match import Match
from freight.models.notification import Notification
from freight.models.quote import Quote


async def _offer(client, headers, driver, quote_id, price=50000, message=None):
    return await client.post(
        f"/driver/counter-offers/quotes/{quote_id}",
        json={"proposed_price": price, "message": message},
        headers=headers(driver),
    )


class TestCreateCounterOffer:

    @pytest.mark.asyncio
    async def test_create(self, client, session_factory, shipper, driver, headers, make_quote):
        quote = await make_quote(shipper)

        response = await _offer(client, headers, driver, quote.id, message="Can do it tonight")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["driver_id"] == driver.id
        assert body["proposed_price"] == 50000
        assert body["message"] == "Can do it tonight"
        assert body["responded_at"] is None

        async with session_factory() as session:
            res = await session.execute(select(Notification.type).where(Notification.receiver_id == shipper.id))
            assert list(res.scalars().all()) == [NotificationType.COUNTER_OFFER_CREATED]

    @pytest.mark.asyncio
    async def test_one_pending_offer_per_driver(self, client, shipper, driver, other_driver, headers, make_quote):
        quote = await make_quote(shipper)
        await _offer(client, headers, driver, quote.id)

        response = await _offer(client, headers, driver, quote.id, price=48000)
        assert response.status_code == 409

        response = await _offer(client, headers, other_driver, quote.id, price=48000)
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_new_offer_after_rejection(self, client, shipper, driver, headers, make_quote):
        quote = await make_quote(shipper)
        first = (await _offer(client, headers, driver, quote.id)).json()
        await client.post(f"/shipper/counter-offers/{first['id']}/reject", headers=headers(shipper))

        response = await _offer(client, headers, driver, quote.id, price=52000)
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_quote_must_be_open(self, client, shipper, driver, headers, make_quote, make_match, accept):
        quote = await make_quote(shipper)
        match = await make_match(shipper, quote.id)
        await accept(driver, match.id)

        response = await _offer(client, headers, driver, quote.id)
        assert response.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [0, -100])
    async def test_price_must_be_positive(self, client, shipper, driver, headers, make_quote, price):
        quote = await make_quote(shipper)
        response = await _offer(client, headers, driver, quote.id, price=price)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_quote(self, client, driver, headers):
        response = await _offer(client, headers, driver, 31337)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_shipper_cannot_offer(self, client, shipper, headers, make_quote):
        quote = await make_quote(shipper)
        response = await _offer(client, headers, shipper, quote.id)
        assert response.status_code == 403


class TestAnswerCounterOffer:

    @pytest.mark.asyncio
    async def test_accept_only_touches_the_offer(
        self, client, session_factory, shipper, driver, headers, make_quote
    ):
        quote = await make_quote(shipper)
        offer = (await _offer(client, headers, driver, quote.id, price=45000)).json()

        response = await client.post(f"/shipper/counter-offers/{offer['id']}/accept", headers=headers(shipper))

        assert response.status_code == 200
        assert response.json()["status"] == "ACCEPTED"
        assert response.json()["responded_at"] is not None

        async with session_factory() as session:
            stored = (await session.execute(select(Quote).where(Quote.id == quote.id))).scalars().first()
            assert stored.final_price == 56100
            assert stored.status == QuoteStatus.OPEN
            matches = await session.execute(select(func.count(Match.id)).where(Match.quote_id == quote.id))
            assert matches.scalar() == 0
            res = await session.execute(select(Notification.type).where(Notification.receiver_id == driver.id))
            assert list(res.scalars().all()) == [NotificationType.COUNTER_OFFER_ACCEPTED]

    @pytest.mark.asyncio
    async def test_reject(self, client, shipper, driver, headers, make_quote):
        quote = await make_quote(shipper)
        offer = (await _offer(client, headers, driver, quote.id)).json()

        response = await client.post(f"/shipper/counter-offers/{offer['id']}/reject", headers=headers(shipper))
        assert response.json()["status"] == "REJECTED"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("first,second", [("accept", "accept"), ("accept", "reject"), ("reject", "accept")])
    async def test_answered_once(self, client, shipper, driver, headers, make_quote, first, second):
        quote = await make_quote(shipper)
        offer = (await _offer(client, headers, driver, quote.id)).json()
        await client.post(f"/shipper/counter-offers/{offer['id']}/{first}", headers=headers(shipper))

        response = await client.post(f"/shipper/counter-offers/{offer['id']}/{second}", headers=headers(shipper))
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_only_quote_owner_answers(self, client, shipper, other_shipper, driver, headers, make_quote):
        quote = await make_quote(shipper)
        offer = (await _offer(client, headers, driver, quote.id)).json()

        response = await client.post(f"/shipper/counter-offers/{offer['id']}/accept", headers=headers(other_shipper))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_offer(self, client, shipper, headers):
        response = await client.post("/shipper/counter-offers/555/accept", headers=headers(shipper))
        assert response.status_code == 404


class TestCounterOfferReads:

    @pytest.mark.asyncio
    async def test_lists(self, client, shipper, other_shipper, driver, other_driver, headers, make_quote):
        quote = await make_quote(shipper)
        await _offer(client, headers, driver, quote.id, price=40000)
        await _offer(client, headers, other_driver, quote.id, price=41000)

        for_quote = await client.get(f"/shipper/counter-offers/quotes/{quote.id}", headers=headers(shipper))
        assert sorted(o["proposed_price"] for o in for_quote.json()) == [40000, 41000]

        forbidden = await client.get(f"/shipper/counter-offers/quotes/{quote.id}", headers=headers(other_shipper))
        assert forbidden.status_code == 403

        mine = await client.get("/driver/counter-offers/", headers=headers(driver))
        assert [o["proposed_price"] for o in mine.json()] == [40000]

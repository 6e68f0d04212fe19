import pytest


class TestNotifications:

    @pytest.mark.asyncio
    async def test_feed_and_unread_count(self, client, shipper, driver, headers, make_quote, make_match, accept):
        match = await make_match(shipper, (await make_quote(shipper)).id)
        await accept(driver, match.id)

        feed = await client.get("/notifications/", headers=headers(shipper))
        assert feed.status_code == 200
        # newest first
        assert [n["type"] for n in feed.json()] == ["MATCH_ACCEPTED", "MATCH_CREATED"]
        assert all(n["match_id"] == match.id for n in feed.json())

        count = await client.get("/notifications/unread-count", headers=headers(shipper))
        assert count.json() == {"unread_count": 2}

    @pytest.mark.asyncio
    async def test_mark_read(self, client, shipper, headers, make_quote, make_match):
        await make_match(shipper, (await make_quote(shipper)).id)
        notification = (await client.get("/notifications/", headers=headers(shipper))).json()[0]

        response = await client.post(f"/notifications/{notification['id']}/read", headers=headers(shipper))
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        count = await client.get("/notifications/unread-count", headers=headers(shipper))
        assert count.json()["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_cannot_read_someone_elses(self, client, shipper, driver, headers, make_quote, make_match):
        await make_match(shipper, (await make_quote(shipper)).id)
        notification = (await client.get("/notifications/", headers=headers(shipper))).json()[0]

        response = await client.post(f"/notifications/{notification['id']}/read", headers=headers(driver))
        assert response.status_code == 403

        assert (await client.get("/notifications/", headers=headers(driver))).json() == []

    @pytest.mark.asyncio
    async def test_missing_notification(self, client, shipper, headers):
        response = await client.post("/notifications/404/read", headers=headers(shipper))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        assert (await client.get("/notifications/")).status_code == 401

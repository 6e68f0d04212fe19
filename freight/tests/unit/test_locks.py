import asyncio

import pytest

from freight.core.locks import active_lock_count, aggregate_lock, match_lock


class TestAggregateLocks:

    @pytest.mark.asyncio
    async def test_same_aggregate_is_serialized(self):
        running = []
        peak = []

        async def worker():
            async with match_lock(1):
                running.append(1)
                peak.append(len(running))
                await asyncio.sleep(0.01)
                running.pop()

        await asyncio.gather(*(worker() for _ in range(5)))
        assert max(peak) == 1

    @pytest.mark.asyncio
    async def test_entry_kept_while_waiting(self):
        release = asyncio.Event()

        async def holder():
            async with aggregate_lock("quote", 7):
                await release.wait()

        async def waiter():
            async with aggregate_lock("quote", 7):
                pass

        tasks = [asyncio.create_task(holder()), asyncio.create_task(waiter())]
        await asyncio.sleep(0.01)
        assert active_lock_count() == 1

        release.set()
        await asyncio.gather(*tasks)
        assert active_lock_count() == 0

    @pytest.mark.asyncio
    async def test_entry_released_on_error(self):
        with pytest.raises(RuntimeError):
            async with aggregate_lock("payment", 3):
                raise RuntimeError("boom")
        assert active_lock_count() == 0

    @pytest.mark.asyncio
    async def test_registry_empty_after_matches(self, shipper, make_quote, make_match):
        for _ in range(20):
            quote = await make_quote(shipper)
            await make_match(shipper, quote.id)
        assert active_lock_count() == 0

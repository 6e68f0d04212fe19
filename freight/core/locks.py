"""Per-aggregate asyncio locks.

Every mutation of a quote or match runs under the lock for that aggregate,
and reads the rows only after the lock is held. Two concurrent accepts of
the same match are therefore serialized inside one process; the conditional
UPDATE in the match service covers the multi-process case.

An entry lives in the registry only while some task holds or waits for it.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Tuple

_locks: Dict[Tuple[str, int], asyncio.Lock] = {}
_holders: Dict[Tuple[str, int], int] = {}


def _acquire_entry(key: Tuple[str, int]) -> asyncio.Lock:
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    _holders[key] = _holders.get(key, 0) + 1
    return lock


def _release_entry(key: Tuple[str, int]) -> None:
    remaining = _holders.get(key, 1) - 1
    if remaining > 0:
        _holders[key] = remaining
        return
    _holders.pop(key, None)
    _locks.pop(key, None)


@asynccontextmanager
async def aggregate_lock(kind: str, aggregate_id: int):
    key = (kind, int(aggregate_id))
    lock = _acquire_entry(key)
    try:
        async with lock:
            yield
    finally:
        _release_entry(key)


def quote_lock(quote_id: int):
    return aggregate_lock("quote", quote_id)


def match_lock(match_id: int):
    return aggregate_lock("match", match_id)


def active_lock_count() -> int:
    return len(_locks)


def reset_locks() -> None:
    _locks.clear()
    _holders.clear()

import asyncio

from qbot.core.locks import KeyedLock


async def test_same_key_is_serialized():
    locks = KeyedLock()
    events: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold("user"):
            events.append(f"{name}-in")
            await asyncio.sleep(0.01)
            events.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert events == ["a-in", "a-out", "b-in", "b-out"]


async def test_different_keys_overlap():
    locks = KeyedLock()
    inside = 0
    peak = 0

    async def worker(key: str) -> None:
        nonlocal inside, peak
        async with locks.hold(key):
            inside += 1
            peak = max(peak, inside)
            await asyncio.sleep(0.01)
            inside -= 1

    await asyncio.gather(worker("a"), worker("b"))
    assert peak == 2


async def test_locks_are_released_when_idle():
    locks = KeyedLock()
    async with locks.hold("user"):
        assert len(locks) == 1
    assert len(locks) == 0


async def test_lock_released_after_error():
    locks = KeyedLock()
    try:
        async with locks.hold("user"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0
    async with locks.hold("user"):
        pass

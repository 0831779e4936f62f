from __future__ import annotations

import asyncio

from services.locks import KeyedLock


def test_same_key_is_serialised():
    locks = KeyedLock()
    order = []

    async def worker(name: str) -> None:
        async with locks.hold("s1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    async def main() -> None:
        await asyncio.gather(worker("a"), worker("b"))

    asyncio.run(main())
    assert order in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])
    assert len(locks) == 0


def test_different_keys_run_concurrently():
    locks = KeyedLock()
    inside = []

    async def worker(key: str, peers: asyncio.Event, mine: asyncio.Event) -> None:
        async with locks.hold(key):
            inside.append(key)
            mine.set()
            await asyncio.wait_for(peers.wait(), timeout=1)

    async def main() -> None:
        a, b = asyncio.Event(), asyncio.Event()
        await asyncio.gather(worker("x", b, a), worker("y", a, b))

    asyncio.run(main())
    assert sorted(inside) == ["x", "y"]
    assert len(locks) == 0


def test_lock_released_on_error():
    locks = KeyedLock()

    async def main() -> None:
        try:
            async with locks.hold("s1"):
                raise ValueError("boom")
        except ValueError:
            pass
        async with locks.hold("s1"):
            return None

    asyncio.run(main())
    assert len(locks) == 0

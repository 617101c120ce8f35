import asyncio

from ledger.locks import PairLocks


async def test_same_pair_is_serialized():
    locks = PairLocks()
    events = []

    async def worker(name):
        async with locks.hold([("p", "l")]):
            events.append(f"{name}-start")
            await asyncio.sleep(0.01)
            events.append(f"{name}-end")

    await asyncio.gather(worker("a"), worker("b"))
    assert events in (["a-start", "a-end", "b-start", "b-end"], ["b-start", "b-end", "a-start", "a-end"])


async def test_distinct_pairs_run_in_parallel():
    locks = PairLocks()
    inside = asyncio.Event()

    async def first():
        async with locks.hold([("p", "l1")]):
            await asyncio.wait_for(inside.wait(), timeout=1)

    async def second():
        async with locks.hold([("p", "l2")]):
            inside.set()

    await asyncio.gather(first(), second())


async def test_overlapping_key_sets_do_not_deadlock():
    locks = PairLocks()

    async def worker(keys):
        async with locks.hold(keys):
            await asyncio.sleep(0.005)

    await asyncio.wait_for(
        asyncio.gather(
            worker([("p", "a"), ("p", "b")]),
            worker([("p", "b"), ("p", "a")]),
            worker([("p", "a")]),
        ),
        timeout=2,
    )


async def test_unused_locks_are_dropped():
    locks = PairLocks()
    async with locks.hold([("p", "l1"), ("p", "l2")]):
        assert len(locks) == 2
    assert len(locks) == 0

import asyncio

from tripplanner.services.ai.destination_context_service import DestinationContextLoader
from tripplanner.utils.generation import RequestGeneration
from tripplanner.utils.pending_ops import PendingOperationQueue


def test_generation_supersedes_older_tokens():
    generation = RequestGeneration()
    first = generation.begin()
    second = generation.begin()

    assert not generation.is_current(first)
    assert generation.is_current(second)

    generation.invalidate()
    assert not generation.is_current(second)


async def test_loader_discards_stale_country():
    release_japan = asyncio.Event()

    async def fetch(code, name):
        if code == "JP":
            await release_japan.wait()
        return {"country": {"code": code}}

    loader = DestinationContextLoader(fetch)
    slow = asyncio.create_task(loader.load("JP", "Japan"))
    await asyncio.sleep(0)

    assert await loader.load("MY", "Malaysia") == {"country": {"code": "MY"}}
    release_japan.set()

    assert await slow is None
    assert loader.country_code == "MY"
    assert loader.context == {"country": {"code": "MY"}}
    assert loader.is_loading is False


async def test_cancelled_load_is_not_applied():
    async def fetch(code, name):
        loader.cancel()
        return {"country": {"code": code}}

    loader = DestinationContextLoader(fetch)
    assert await loader.load("TH", "Thailand") is None
    assert loader.context is None


def test_pending_ops_overlay_and_merge():
    queue = PendingOperationQueue()
    snapshot = [
        {"id": "a", "order": 0, "revision": 3, "name": "Zoo"},
        {"id": "b", "order": 1, "revision": 1, "name": "Park"},
    ]

    queue.enqueue("a", 3, order=1)
    queue.enqueue("b", 1, order=0)
    queue.enqueue("b", 1, name="City Park")

    assert len(queue) == 2
    view = queue.overlay(snapshot)
    assert [row["id"] for row in view] == ["b", "a"]
    assert view[0]["name"] == "City Park"
    # snapshot rows are not mutated
    assert snapshot[0]["order"] == 0


def test_pending_ops_reconcile_drops_superseded_edits():
    queue = PendingOperationQueue()
    queue.enqueue("a", 3, order=1)
    queue.enqueue("b", 1, order=0)
    queue.enqueue("gone", 2, order=2)

    dropped = queue.reconcile([
        {"id": "a", "revision": 4},
        {"id": "b", "revision": 1},
    ])

    assert sorted(dropped) == ["a", "gone"]
    assert "b" in queue
    assert "a" not in queue


def test_pending_ops_rollback():
    queue = PendingOperationQueue()
    queue.enqueue("a", 0, order=2)
    assert queue.rollback("a").fields == {"order": 2}
    assert queue.rollback("a") is None
    assert queue.overlay([{"id": "a", "order": 0}]) == [{"id": "a", "order": 0}]

"""Dense zero-based ``order`` maintenance for drag-reorderable collections.

A scope is any list of rows sharing a key (plans or destinations of a trip,
schedule items of one plan and day). Within a scope the orders are always
exactly ``0..n-1``.
"""
from typing import List, Sequence, TypeVar

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import InvalidReorder

T = TypeVar("T")


def sort_key(item):
    # duplicate orders should not happen, but if they do keep insertion sequence
    return (item.order, item.created_at, item.id)


def sorted_scope(items: Sequence[T]) -> List[T]:
    return sorted(items, key=sort_key)


def next_order(items: Sequence) -> int:
    if not items:
        return 0
    return max(item.order for item in items) + 1


def plan_reorder(items: Sequence[T], ordered_ids: Sequence[str]) -> List[T]:
    """Validate a full reorder request; returns the items in requested order.

    Raises before anything is written, so a bad request changes nothing.
    """
    by_id = {item.id: item for item in items}
    if len(set(ordered_ids)) != len(ordered_ids):
        raise InvalidReorder("Reorder list contains duplicate ids")
    unknown = [i for i in ordered_ids if i not in by_id]
    if unknown:
        raise InvalidReorder(f"{len(unknown)} id(s) do not belong to this collection")
    if len(ordered_ids) != len(by_id):
        raise InvalidReorder("Reorder list must include every item in the collection")
    return [by_id[i] for i in ordered_ids]


async def apply_order(store: TripDataStore, ordered: Sequence) -> int:
    """Patch each row whose order differs from its index. Returns rows changed."""
    changed = 0
    for index, item in enumerate(ordered):
        if item.order != index:
            await store.patch(item, order=index)
            changed += 1
    return changed


async def reorder(store: TripDataStore, items: Sequence, ordered_ids: Sequence[str]) -> int:
    return await apply_order(store, plan_reorder(items, ordered_ids))


async def close_gaps(store: TripDataStore, remaining: Sequence) -> int:
    """Re-densify a scope after a removal. Idempotent."""
    return await apply_order(store, sorted_scope(remaining))

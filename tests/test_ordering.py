from dataclasses import dataclass, field
from datetime import datetime

import pytest

from tripplanner.core.exceptions import InvalidReorder
from tripplanner.utils import ordering


@dataclass
class Row:
    id: str
    order: int
    created_at: datetime = field(default_factory=lambda: datetime(2025, 1, 1))


class RecordingStore:
    def __init__(self):
        self.patched = []

    async def patch(self, obj, **fields):
        for key, value in fields.items():
            setattr(obj, key, value)
        self.patched.append(obj.id)
        return obj


def orders(rows):
    return {row.id: row.order for row in rows}


def test_next_order_of_empty_scope_is_zero():
    assert ordering.next_order([]) == 0


def test_next_order_appends_after_max():
    assert ordering.next_order([Row("a", 0), Row("b", 4), Row("c", 1)]) == 5


def test_sorted_scope_tolerates_duplicate_orders():
    early = Row("z", 1, datetime(2025, 1, 1))
    late = Row("a", 1, datetime(2025, 1, 2))
    first = Row("m", 0)
    assert [r.id for r in ordering.sorted_scope([late, early, first])] == ["m", "z", "a"]


@pytest.mark.parametrize("ordered_ids, message", [
    (["a", "a", "b"], "duplicate"),
    (["a", "b", "x"], "do not belong"),
    (["a", "b"], "every item"),
])
def test_plan_reorder_rejects_bad_lists(ordered_ids, message):
    rows = [Row("a", 0), Row("b", 1), Row("c", 2)]
    with pytest.raises(InvalidReorder) as exc:
        ordering.plan_reorder(rows, ordered_ids)
    assert message in exc.value.detail


async def test_reorder_assigns_index_and_patches_only_changed_rows():
    rows = [Row("a", 0), Row("b", 1), Row("c", 2)]
    store = RecordingStore()

    changed = await ordering.reorder(store, rows, ["b", "a", "c"])

    assert changed == 2
    assert orders(rows) == {"a": 1, "b": 0, "c": 2}
    assert sorted(store.patched) == ["a", "b"]


async def test_failed_reorder_changes_nothing():
    rows = [Row("a", 0), Row("b", 1)]
    store = RecordingStore()

    with pytest.raises(InvalidReorder):
        await ordering.reorder(store, rows, ["b", "foreign"])

    assert orders(rows) == {"a": 0, "b": 1}
    assert store.patched == []


async def test_close_gaps_is_idempotent():
    rows = [Row("a", 0), Row("c", 2), Row("d", 5)]
    store = RecordingStore()

    await ordering.close_gaps(store, rows)
    assert orders(rows) == {"a": 0, "c": 1, "d": 2}

    assert await ordering.close_gaps(store, rows) == 0
    assert orders(rows) == {"a": 0, "c": 1, "d": 2}

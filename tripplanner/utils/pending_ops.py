"""Optimistic local edits layered over server snapshots.

Drag-and-drop clients apply an edit locally at once and send it to the
server. Until the server's copy of that row carries a newer ``revision``
than the one the edit was based on, the local edit is overlaid on every
snapshot. After that the server's version wins.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass
class PendingOperation:
    entity_id: str
    base_revision: int
    fields: Dict[str, Any] = field(default_factory=dict)


class PendingOperationQueue:
    def __init__(self):
        self._ops: Dict[str, PendingOperation] = {}

    def __len__(self) -> int:
        return len(self._ops)

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._ops

    def get(self, entity_id: str) -> Optional[PendingOperation]:
        return self._ops.get(entity_id)

    def enqueue(self, entity_id: str, base_revision: int, **fields) -> PendingOperation:
        """Record a local edit. A second edit to the same row merges into the first."""
        op = self._ops.get(entity_id)
        if op is None:
            op = self._ops[entity_id] = PendingOperation(entity_id, base_revision)
        op.fields.update(fields)
        return op

    def rollback(self, entity_id: str) -> Optional[PendingOperation]:
        """Forget a local edit, e.g. after the server rejected it."""
        return self._ops.pop(entity_id, None)

    def overlay(self, snapshot: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        rows = []
        for row in snapshot:
            op = self._ops.get(row["id"])
            rows.append({**row, **op.fields} if op else dict(row))
        if rows and all("order" in row for row in rows):
            rows.sort(key=lambda r: r["order"])
        return rows

    def reconcile(self, snapshot: Iterable[Dict[str, Any]]) -> List[str]:
        """Drop edits the server has moved past. Returns the dropped entity ids."""
        revisions = {row["id"]: row.get("revision", 0) for row in snapshot}
        dropped = []
        for entity_id, op in list(self._ops.items()):
            # a row gone from the snapshot was deleted on the server
            if entity_id not in revisions or revisions[entity_id] > op.base_revision:
                del self._ops[entity_id]
                dropped.append(entity_id)
        return dropped

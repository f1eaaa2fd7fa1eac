import uuid
from typing import Dict, List, Optional

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import NotFound
from tripplanner.core.logger import logger
from tripplanner.models.trips.trip_checklist import ChecklistType, TripChecklist
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.user.user import User
from tripplanner.services.trips.access_service import check_access
from tripplanner.utils.validators import clean_name

DEFAULT_CHECKLISTS = {
    ChecklistType.VISA: [
        ("v1", "Valid passport (6+ months validity)"),
        ("v2", "Visa requirements for the destination checked"),
        ("v3", "Return flight tickets booked"),
        ("v4", "Hotel booking confirmations saved"),
    ],
    ChecklistType.HEALTH: [
        ("h1", "Travel insurance purchased"),
        ("h2", "Toddler medications packed"),
        ("h3", "Mosquito repellent (20%+ DEET)"),
        ("h4", "Sunscreen SPF 50+"),
        ("h5", "First aid kit prepared"),
        ("h6", "Check vaccination requirements"),
    ],
    ChecklistType.DOCUMENTS: [
        ("d1", "Passport copies (physical + digital)"),
        ("d2", "Emergency contact numbers saved"),
        ("d3", "Hotel addresses in local language"),
        ("d4", "Credit cards ready + bank notified"),
        ("d5", "Travel insurance documents"),
    ],
    ChecklistType.PACKING: [
        ("p1", "Baby carrier"),
        ("p2", "Stroller for malls and airports"),
        ("p3", "Warm layers for cooler areas"),
        ("p4", "Modest clothing for temples"),
        ("p5", "Swim gear"),
        ("p6", "Rain jacket/umbrella"),
        ("p7", "Toddler snacks for travel"),
    ],
}


def default_items(checklist_type: ChecklistType) -> List[dict]:
    return [{"id": item_id, "text": text, "checked": False} for item_id, text in DEFAULT_CHECKLISTS[checklist_type]]


def _checklist_dict(checklist_type: ChecklistType, row: Optional[TripChecklist]) -> dict:
    if row is None:
        return {"type": checklist_type, "items": default_items(checklist_type), "updated_at": None}
    return {"type": row.type, "items": row.items, "updated_at": row.updated_at}


async def _rows(store: TripDataStore, trip_id: str) -> Dict[ChecklistType, TripChecklist]:
    rows = await store.query(TripChecklist, TripChecklist.trip_id == trip_id)
    return {row.type: row for row in rows}


async def _materialize(store: TripDataStore, trip_id: str, checklist_type: ChecklistType,
                       user: User) -> TripChecklist:
    """The stored checklist of this type, created from the defaults on first write."""
    row = (await _rows(store, trip_id)).get(checklist_type)
    if row is None:
        row = await store.insert(TripChecklist(
            trip_id=trip_id,
            type=checklist_type,
            items=default_items(checklist_type),
            updated_by=user.id,
        ))
    return row


async def get_checklists(store: TripDataStore, trip_id: str, user: User) -> List[dict]:
    """Every checklist type, falling back to the defaults for types never edited."""
    await check_access(store, trip_id, user)
    rows = await _rows(store, trip_id)
    return [_checklist_dict(t, rows.get(t)) for t in ChecklistType]


async def get_checklist(store: TripDataStore, trip_id: str, checklist_type: ChecklistType, user: User) -> dict:
    await check_access(store, trip_id, user)
    return _checklist_dict(checklist_type, (await _rows(store, trip_id)).get(checklist_type))


async def initialize_defaults(store: TripDataStore, trip_id: str, user: User) -> List[dict]:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    rows = await _rows(store, trip_id)
    missing = [t for t in ChecklistType if t not in rows]
    for checklist_type in missing:
        rows[checklist_type] = await _materialize(store, trip_id, checklist_type, user)
    await store.commit()
    if missing:
        logger.info(f"Initialized {len(missing)} default checklist(s) for trip {trip_id}")
    return [_checklist_dict(t, rows[t]) for t in ChecklistType]


async def toggle_item(store: TripDataStore, trip_id: str, checklist_type: ChecklistType, item_id: str,
                      user: User) -> dict:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    row = await _materialize(store, trip_id, checklist_type, user)
    if not any(item["id"] == item_id for item in row.items):
        raise NotFound("Checklist item not found")

    items = [
        {**item, "checked": not item["checked"]} if item["id"] == item_id else item
        for item in row.items
    ]
    await store.patch(row, items=items, updated_by=user.id)
    await store.commit()
    return _checklist_dict(checklist_type, row)


async def add_item(store: TripDataStore, trip_id: str, checklist_type: ChecklistType, text: str,
                   user: User) -> dict:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    text = clean_name(text, "Checklist item")
    row = await _materialize(store, trip_id, checklist_type, user)

    item = {"id": f"custom-{uuid.uuid4().hex[:12]}", "text": text, "checked": False}
    await store.patch(row, items=[*row.items, item], updated_by=user.id)
    await store.commit()
    logger.info(f"Item {item['id']} added to the {checklist_type.value} checklist of trip {trip_id}")
    return _checklist_dict(checklist_type, row)

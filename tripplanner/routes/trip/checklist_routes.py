from typing import List

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.trips.trip_checklist import ChecklistType
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.checklist import ChecklistItemCreate, ChecklistOut
from tripplanner.services.trips import checklist_service

router = APIRouter(prefix="/trips", tags=["Trip Checklists"])


@router.get("/{trip_id}/checklists", response_model=List[ChecklistOut])
async def get_checklists_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await checklist_service.get_checklists(store, trip_id, current_user)


@router.post("/{trip_id}/checklists/initialize", response_model=List[ChecklistOut])
async def initialize_checklists_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await checklist_service.initialize_defaults(store, trip_id, current_user)


@router.get("/{trip_id}/checklists/{checklist_type}", response_model=ChecklistOut)
async def get_checklist_route(
    trip_id: str,
    checklist_type: ChecklistType,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await checklist_service.get_checklist(store, trip_id, checklist_type, current_user)


@router.post("/{trip_id}/checklists/{checklist_type}/items", response_model=ChecklistOut,
             status_code=status.HTTP_201_CREATED)
async def add_checklist_item_route(
    trip_id: str,
    checklist_type: ChecklistType,
    data: ChecklistItemCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await checklist_service.add_item(store, trip_id, checklist_type, data.text, current_user)


@router.post("/{trip_id}/checklists/{checklist_type}/items/{item_id}/toggle", response_model=ChecklistOut)
async def toggle_checklist_item_route(
    trip_id: str,
    checklist_type: ChecklistType,
    item_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await checklist_service.toggle_item(store, trip_id, checklist_type, item_id, current_user)

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import BulkIdsRequest, CreatedIdsResponse, SuccessResponse
from tripplanner.schemas.itineraries.schedule_item import (
    AIItineraryCreate,
    MoveItemRequest,
    ScheduleItemCreate,
    ScheduleItemOut,
    ScheduleItemUpdate,
    ScheduleItemWithContext,
    ScheduleReorderRequest,
)
from tripplanner.services.itineraries import schedule_service

router = APIRouter(tags=["Schedule"])


@router.get("/plans/{plan_id}/schedule-items", response_model=List[ScheduleItemOut])
async def get_schedule_items_route(
    plan_id: str,
    day_date: Optional[str] = None,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.get_schedule_items(store, plan_id, current_user, day_date)


@router.get("/trips/{trip_id}/schedule/{day_date}", response_model=List[ScheduleItemWithContext])
async def get_schedule_items_by_date_route(
    trip_id: str,
    day_date: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.get_schedule_items_by_date(store, trip_id, day_date, current_user)


@router.post("/schedule-items", response_model=ScheduleItemOut, status_code=status.HTTP_201_CREATED)
async def create_schedule_item_route(
    data: ScheduleItemCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.create_schedule_item(store, data, current_user)


@router.put("/schedule-items/reorder", response_model=SuccessResponse)
async def reorder_schedule_items_route(
    data: ScheduleReorderRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.reorder_schedule_items(
        store, data.plan_id, data.day_date, data.ordered_ids, current_user
    )


@router.post("/schedule-items/ai-itinerary", response_model=CreatedIdsResponse,
             status_code=status.HTTP_201_CREATED)
async def create_ai_itinerary_route(
    data: AIItineraryCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    ids = await schedule_service.create_ai_itinerary(store, data.plan_id, data.days, current_user)
    return {"ids": ids}


@router.post("/schedule-items/bulk-delete")
async def delete_multiple_schedule_items_route(
    data: BulkIdsRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.delete_multiple_schedule_items(store, data.ids, current_user)


@router.patch("/schedule-items/{item_id}", response_model=ScheduleItemOut)
async def update_schedule_item_route(
    item_id: str,
    data: ScheduleItemUpdate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.update_schedule_item(store, item_id, data, current_user)


@router.delete("/schedule-items/{item_id}", response_model=SuccessResponse)
async def delete_schedule_item_route(
    item_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.delete_schedule_item(store, item_id, current_user)


@router.post("/schedule-items/{item_id}/move", response_model=ScheduleItemOut)
async def move_schedule_item_route(
    item_id: str,
    data: MoveItemRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await schedule_service.move_item_between_plans(
        store, item_id, data.target_plan_id, current_user, data.target_day_date
    )

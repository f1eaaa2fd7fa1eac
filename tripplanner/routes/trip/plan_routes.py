from typing import List

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import ReorderRequest, SuccessResponse
from tripplanner.schemas.trip.plan import PlanCreate, PlanOut, PlanUpdate, PlanWithItems
from tripplanner.services.trips import plan_service

router = APIRouter(tags=["Plans"])


@router.get("/trips/{trip_id}/plans", response_model=List[PlanOut])
async def get_plans_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await plan_service.get_plans(store, trip_id, current_user)


@router.post("/trips/{trip_id}/plans", response_model=PlanOut, status_code=status.HTTP_201_CREATED)
async def create_plan_route(
    trip_id: str,
    data: PlanCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await plan_service.create_plan(store, trip_id, data, current_user)


@router.put("/trips/{trip_id}/plans/reorder", response_model=SuccessResponse)
async def reorder_plans_route(
    trip_id: str,
    data: ReorderRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await plan_service.reorder_plans(store, trip_id, data.ordered_ids, current_user)


@router.get("/plans/{plan_id}", response_model=PlanWithItems)
async def get_plan_route(
    plan_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    result = await plan_service.get_plan(store, plan_id, current_user)
    return PlanWithItems(
        **PlanOut.model_validate(result["plan"]).model_dump(),
        schedule_items=result["schedule_items"],
    )


@router.patch("/plans/{plan_id}", response_model=PlanOut)
async def update_plan_route(
    plan_id: str,
    data: PlanUpdate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await plan_service.update_plan(store, plan_id, data, current_user)


@router.delete("/plans/{plan_id}", response_model=SuccessResponse)
async def delete_plan_route(
    plan_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await plan_service.delete_plan(store, plan_id, current_user)


@router.post("/plans/{plan_id}/set-default", response_model=SuccessResponse)
async def set_default_plan_route(
    plan_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await plan_service.set_default_plan(store, plan_id, current_user)

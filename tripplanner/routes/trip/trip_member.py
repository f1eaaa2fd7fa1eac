from typing import List

from fastapi import APIRouter, Depends

from tripplanner.core.cache import RedisCache
from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.core.redis_lifecyle import get_cache
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import SuccessResponse
from tripplanner.schemas.trip.trip_member import MemberInvite, MemberOut, RoleUpdate
from tripplanner.services.trips import trip_member_service

router = APIRouter(tags=["Trip Members"])


@router.get("/trips/{trip_id}/members", response_model=List[MemberOut])
async def get_members_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.get_members(store, trip_id, current_user)


@router.post("/trips/{trip_id}/members/invite")
async def invite_member_route(
    trip_id: str,
    invite: MemberInvite,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.invite_member(store, trip_id, invite, current_user)


@router.get("/trips/{trip_id}/members/pending", response_model=List[MemberOut])
async def get_trip_pending_invites_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.get_trip_pending_invites(store, trip_id, current_user)


@router.patch("/members/{member_id}/role", response_model=SuccessResponse)
async def update_member_role_route(
    member_id: str,
    data: RoleUpdate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.update_member_role(store, member_id, data.role, current_user)


@router.delete("/members/{member_id}", response_model=SuccessResponse)
async def remove_member_route(
    member_id: str,
    store: TripDataStore = Depends(get_store),
    cache: RedisCache = Depends(get_cache),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.remove_member(store, member_id, current_user, cache)


@router.post("/trips/{trip_id}/leave", response_model=SuccessResponse)
async def leave_trip_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    cache: RedisCache = Depends(get_cache),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.leave_trip(store, trip_id, current_user, cache)

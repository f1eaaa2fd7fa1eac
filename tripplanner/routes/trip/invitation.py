from typing import List

from fastapi import APIRouter, Depends, status

from tripplanner.core.cache import RedisCache
from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.core.redis_lifecyle import get_cache
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import SuccessResponse
from tripplanner.schemas.trip.invite import InviteLinkCreate, InviteLinkOut, JoinResponse, JoinViaLink
from tripplanner.schemas.trip.trip_member import PendingInviteOut
from tripplanner.services.trips import trip_member_service

router = APIRouter(tags=["Invitations"])


@router.get("/invites/pending", response_model=List[PendingInviteOut])
async def get_my_pending_invites_route(
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.get_pending_invites(store, current_user)


@router.post("/invites/{member_id}/accept")
async def accept_invite_route(
    member_id: str,
    store: TripDataStore = Depends(get_store),
    cache: RedisCache = Depends(get_cache),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.accept_invite(store, member_id, current_user, cache)


@router.post("/invites/{member_id}/decline", response_model=SuccessResponse)
async def decline_invite_route(
    member_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.decline_invite(store, member_id, current_user)


@router.post("/invites/join", response_model=JoinResponse)
async def join_via_link_route(
    data: JoinViaLink,
    store: TripDataStore = Depends(get_store),
    cache: RedisCache = Depends(get_cache),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.join_via_link(store, data.token, current_user, cache)


@router.post("/trips/{trip_id}/invite-links", response_model=InviteLinkOut, status_code=status.HTTP_201_CREATED)
async def create_invite_link_route(
    trip_id: str,
    data: InviteLinkCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.create_invite_link(store, trip_id, data, current_user)


@router.get("/trips/{trip_id}/invite-links", response_model=List[InviteLinkOut])
async def get_invite_links_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.get_trip_invite_links(store, trip_id, current_user)


@router.delete("/invite-links/{link_id}", response_model=SuccessResponse)
async def revoke_invite_link_route(
    link_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await trip_member_service.revoke_invite_link(store, link_id, current_user)

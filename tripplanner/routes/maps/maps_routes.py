from typing import Optional

from fastapi import APIRouter, Depends

from tripplanner.core.config import settings
from tripplanner.core.exceptions import InvalidArgument, NotFound
from tripplanner.core.maps_client import MapsClient, get_maps_client
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.maps.maps import ReverseGeocodeResponse, RouteRequest, RouteResponse

router = APIRouter(prefix="/maps", tags=["Maps"])


@router.get("/reverse-geocode", response_model=ReverseGeocodeResponse)
async def reverse_geocode_route(
    lat: float,
    lng: float,
    maps: MapsClient = Depends(get_maps_client),
    current_user: User = Depends(get_current_user)
):
    result = await maps.reverse_geocode(lat, lng)
    if result is None:
        raise NotFound("No address found for these coordinates")
    return result


@router.post("/route", response_model=RouteResponse)
async def route_route(
    data: RouteRequest,
    maps: MapsClient = Depends(get_maps_client),
    current_user: User = Depends(get_current_user)
):
    waypoints = [{"lat": p.lat, "lng": p.lng} for p in data.waypoints]
    return await maps.route(waypoints, data.travel_mode.value)


@router.get("/distance-matrix")
async def distance_matrix_route(
    origins: Optional[str] = None,
    destinations: Optional[str] = None,
    mode: Optional[str] = None,
    key: Optional[str] = None,
    maps: MapsClient = Depends(get_maps_client),
    current_user: User = Depends(get_current_user)
):
    # the browser may pass its own key; otherwise the server's is used
    key = key or settings.GOOGLE_MAPS_API_KEY
    if not origins or not destinations or not mode or not key:
        raise InvalidArgument("Missing required parameters: origins, destinations, mode, key")
    return await maps.distance_matrix(origins, destinations, mode, key)

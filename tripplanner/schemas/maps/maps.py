from pydantic import BaseModel
from typing import List, Optional

from tripplanner.models.trips.trip_destination import TravelMode


class LatLng(BaseModel):
    lat: float
    lng: float


class RouteRequest(BaseModel):
    waypoints: List[LatLng]
    travel_mode: TravelMode = TravelMode.DRIVING


class RouteResponse(BaseModel):
    coordinates: List[LatLng]
    distance_km: float
    duration_minutes: float
    use_fallback: bool = False


class ReverseGeocodeResponse(BaseModel):
    name: str
    address: str
    place_id: Optional[str] = None

"""HTTP gateways to the mapping providers (Google Geocoding / Distance Matrix, OpenRouteService)."""
import math
from typing import Any, Dict, List, Optional

import httpx
from fastapi import Depends

from tripplanner.core.cache import RedisCache
from tripplanner.core.config import settings
from tripplanner.core.exceptions import InvalidArgument, UpstreamServiceError
from tripplanner.core.logger import logger
from tripplanner.core.redis_lifecyle import get_cache
from tripplanner.utils.validators import validate_coordinates

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
ORS_DIRECTIONS_URL = "https://api.openrouteservice.org/v2/directions"

ORS_PROFILES = {
    "DRIVING": "driving-car",
    "TRANSIT": "driving-car",  # ORS has no public transit profile
    "BICYCLING": "cycling-regular",
    "WALKING": "foot-walking",
}

# assumed average speeds (km/h) for the straight-line fallback
FALLBACK_SPEEDS = {"DRIVING": 40.0, "TRANSIT": 25.0, "BICYCLING": 15.0, "WALKING": 5.0}


def pick_place_name(result: Dict[str, Any]) -> str:
    """Pick a readable name from a geocoder result.

    An establishment or point of interest wins outright; otherwise the first
    premise, route, neighborhood or sublocality component in result order.
    """
    name = ""
    components = result.get("address_components") or []
    for component in components:
        types = component.get("types") or []
        if "establishment" in types or "point_of_interest" in types:
            name = component.get("long_name", "")
            break
        if not name and any(t in types for t in ("premise", "route", "neighborhood", "sublocality")):
            name = component.get("long_name", "")

    if not name:
        formatted = result.get("formatted_address") or ""
        name = (components[0].get("long_name") if components else "") or formatted.split(",")[0] or "Unknown Location"
    return name


def haversine_km(a: Dict[str, float], b: Dict[str, float]) -> float:
    lat1, lng1, lat2, lng2 = map(math.radians, (a["lat"], a["lng"], b["lat"], b["lng"]))
    h = math.sin((lat2 - lat1) / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin((lng2 - lng1) / 2) ** 2
    return 2 * 6371.0 * math.asin(math.sqrt(h))


class MapsClient:
    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, cache: Optional[RedisCache] = None):
        self.client = http_client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        self.cache = cache
        self.google_api_key = settings.GOOGLE_MAPS_API_KEY
        self.ors_api_key = settings.ORS_API_KEY

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()

    async def _get_json(self, url: str, params: Dict[str, Any], provider: str) -> Dict[str, Any]:
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"{provider} error: {e.response.status_code}")
            raise UpstreamServiceError(f"{provider} error: {e.response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"{provider} request failed: {e}")
            raise UpstreamServiceError(f"{provider} request failed")

    async def reverse_geocode(self, lat: float, lng: float) -> Optional[Dict[str, Any]]:
        """Coordinates -> {name, address, place_id}; None when nothing is there."""
        validate_coordinates(lat, lng)

        cache_key = f"geocode:{lat:.6f},{lng:.6f}"
        if self.cache:
            cached = await self.cache.get(cache_key)
            if cached:
                return cached

        if not self.google_api_key:
            raise UpstreamServiceError("Geocoding service not configured")

        data = await self._get_json(
            GEOCODE_URL, {"latlng": f"{lat},{lng}", "key": self.google_api_key}, "Google Geocoding API"
        )
        status = data.get("status")
        if status == "ZERO_RESULTS":
            return None
        if status != "OK" or not data.get("results"):
            logger.warning(f"Geocoding failed for {lat},{lng}: {status}")
            raise UpstreamServiceError(f"Geocoding failed: {status}")

        first = data["results"][0]
        result = {
            "name": pick_place_name(first),
            "address": first.get("formatted_address") or "",
            "place_id": first.get("place_id"),
        }
        if self.cache:
            await self.cache.set(cache_key, result, expire=settings.GEOCODE_CACHE_SECONDS)
        return result

    async def route(self, waypoints: List[Dict[str, float]], travel_mode: str = "DRIVING") -> Dict[str, Any]:
        """Ordered waypoints -> {coordinates, distance_km, duration_minutes, use_fallback}."""
        if len(waypoints) < 2:
            raise InvalidArgument("At least two waypoints are required")
        for point in waypoints:
            validate_coordinates(point["lat"], point["lng"])
        if travel_mode not in ORS_PROFILES:
            raise InvalidArgument(f"Unsupported travel mode: {travel_mode}")

        if not self.ors_api_key:
            logger.warning("No OpenRouteService API key configured, using straight line fallback")
            distance = sum(haversine_km(a, b) for a, b in zip(waypoints, waypoints[1:]))
            return {
                "coordinates": [{"lat": p["lat"], "lng": p["lng"]} for p in waypoints],
                "distance_km": round(distance, 3),
                "duration_minutes": round(distance / FALLBACK_SPEEDS[travel_mode] * 60, 1),
                "use_fallback": True,
            }

        url = f"{ORS_DIRECTIONS_URL}/{ORS_PROFILES[travel_mode]}/geojson"
        headers = {"Authorization": self.ors_api_key, "Content-Type": "application/json"}
        body = {"coordinates": [[p["lng"], p["lat"]] for p in waypoints]}
        try:
            response = await self.client.post(url, json=body, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"OpenRouteService API error: {e.response.status_code} - {e.response.text}")
            raise UpstreamServiceError(f"OpenRouteService API error: {e.response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"OpenRouteService request failed: {e}")
            raise UpstreamServiceError("OpenRouteService request failed")

        if data.get("error"):
            raise UpstreamServiceError((data["error"] or {}).get("message") or "No route found")
        features = data.get("features") or []
        if not features:
            raise UpstreamServiceError("No route found")

        feature = features[0]
        summary = feature["properties"]["summary"]
        return {
            "coordinates": [{"lat": lat, "lng": lng} for lng, lat in feature["geometry"]["coordinates"]],
            "distance_km": summary.get("distance", 0) / 1000,
            "duration_minutes": summary.get("duration", 0) / 60,
            "use_fallback": False,
        }

    async def distance_matrix(self, origins: str, destinations: str, mode: str, key: str) -> Dict[str, Any]:
        """Pass-through to Google Distance Matrix, which can't be called from a browser."""
        params = {
            "origins": origins,
            "destinations": destinations,
            "mode": mode.lower(),
            "key": key,
        }
        return await self._get_json(DISTANCE_MATRIX_URL, params, "Google Maps API")


_maps_client: Optional[MapsClient] = None


async def get_maps_client(cache: RedisCache = Depends(get_cache)) -> MapsClient:
    """FastAPI dependency; one shared httpx client per process."""
    global _maps_client
    if _maps_client is None:
        _maps_client = MapsClient(cache=cache)
    return _maps_client


async def close_maps_client():
    global _maps_client
    if _maps_client:
        await _maps_client.close()
        _maps_client = None

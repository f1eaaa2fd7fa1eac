from fastapi import APIRouter

from tripplanner.routes.ai import ai_routes, destination_context
from tripplanner.routes.auth import auth
from tripplanner.routes.itineraries import schedule_routes
from tripplanner.routes.maps import maps_routes
from tripplanner.routes.trip import (
    activity_routes,
    checklist_routes,
    comment_routes,
    destination_routes,
    invitation,
    location_routes,
    plan_routes,
    trip_member,
    trip_routes,
)

api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router)

# Trip routes
api_router.include_router(trip_routes.router)
api_router.include_router(trip_member.router)
api_router.include_router(invitation.router)
api_router.include_router(plan_routes.router)
api_router.include_router(location_routes.router)
api_router.include_router(destination_routes.router)
api_router.include_router(comment_routes.router)
api_router.include_router(activity_routes.router)
api_router.include_router(checklist_routes.router)

# Itinerary routes
api_router.include_router(schedule_routes.router)

# AI routes
api_router.include_router(ai_routes.router)
api_router.include_router(destination_context.router)

# Maps proxy routes
api_router.include_router(maps_routes.router)

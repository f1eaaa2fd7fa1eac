from typing import List

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.llm_client import LLMGateway
from tripplanner.models.trips.trip_location import TripLocation
from tripplanner.models.trips.trip_model import Trip
from tripplanner.models.user.user import User
from tripplanner.schemas.ai.chat import ChatMessage
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.plan_service import trip_plans
from tripplanner.utils.ai_itinerary import LOCATION_CATEGORIES

CHAT_MAX_TOKENS = 2048

_LOCATION_ITEM = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Name of the place"},
        "lat": {"type": "number", "description": "Latitude coordinate"},
        "lng": {"type": "number", "description": "Longitude coordinate"},
        "category": {"type": "string", "enum": LOCATION_CATEGORIES},
        "description": {"type": "string", "description": "Brief description of the place"},
        "ai_reason": {"type": "string", "description": "Why you're recommending this place"},
        "toddler_rating": {"type": "number", "description": "1-5, how well it suits a toddler"},
        "estimated_duration": {"type": "string", "description": "e.g. 2 hours"},
        "tips": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["name", "lat", "lng"],
}

_ACTIVITY_ITEM = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "start_time": {"type": "string", "description": "HH:MM, 24-hour"},
        "end_time": {"type": "string", "description": "HH:MM, 24-hour"},
        "location_name": {"type": "string", "description": "Name of a trip location, if any"},
        "notes": {"type": "string"},
        "is_flexible": {"type": "boolean"},
    },
    "required": ["title", "start_time", "end_time"],
}

TRIP_TOOLS = [
    {
        "name": "add_trip_locations",
        "description": "Add recommended places to the trip's saved locations. "
                       "Use this whenever you recommend specific places with coordinates.",
        "input_schema": {
            "type": "object",
            "properties": {"locations": {"type": "array", "items": _LOCATION_ITEM}},
            "required": ["locations"],
        },
    },
    {
        "name": "create_itinerary",
        "description": "Create scheduled activities day by day on the trip's default plan.",
        "input_schema": {
            "type": "object",
            "properties": {
                "days": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "day_date": {"type": "string", "description": "YYYY-MM-DD"},
                            "activities": {"type": "array", "items": _ACTIVITY_ITEM},
                        },
                        "required": ["day_date", "activities"],
                    },
                },
            },
            "required": ["days"],
        },
    },
]


def build_system_prompt(trip: Trip, locations: List[TripLocation], plan_names: List[str]) -> str:
    location_summary = "\n".join(
        f"- {loc.name} ({loc.category or 'uncategorized'}): {loc.description or 'No description'}."
        + (f" Toddler rating: {loc.toddler_rating}/5." if loc.toddler_rating is not None else "")
        for loc in locations
    ) or "- No locations saved yet"

    home_base = trip.home_base
    base_line = f"- Base: {home_base['name']}" if home_base else "- Base: Not specified"

    return (
        f"You are a helpful travel assistant for a family trip: {trip.name}"
        f" ({trip.start_date} - {trip.end_date}).\n\n"
        f"TRIP CONTEXT:\n"
        f"- Destination: {trip.destination or 'Not specified'}\n"
        f"- Travelers: {trip.traveler_info or 'Not specified'}\n"
        f"- Interests: {trip.interests or 'Not specified'}\n"
        f"{base_line}\n"
        f"- Plans: {', '.join(plan_names)}\n"
        + (f"- Notes: {trip.description}\n" if trip.description else "")
        + f"\nSAVED LOCATIONS:\n{location_summary}\n\n"
        f"IMPORTANT RULES:\n"
        f"1. Consider the travelers, including any young children, when suggesting activities\n"
        f"2. Recommend indoor alternatives when weather could be a problem\n"
        f"3. Warn about specific location requirements (stroller access, dress codes)\n"
        f"4. Be concise but helpful\n\n"
        f"TOOLS:\n"
        f"Use add_trip_locations when you recommend specific places with coordinates.\n"
        f"Use create_itinerary when the user asks you to plan days. Dates must fall between "
        f"{trip.start_date} and {trip.end_date}; use HH:MM 24-hour times."
    )


async def chat(store: TripDataStore, llm: LLMGateway, trip_id: str, messages: List[ChatMessage], user: User) -> dict:
    access = await check_access(store, trip_id, user)
    locations = await store.query(TripLocation, TripLocation.trip_id == trip_id,
                                  order_by=[TripLocation.added_at, TripLocation.id])
    plans = await trip_plans(store, trip_id)

    return await llm.complete_with_tools(
        system=build_system_prompt(access.trip, locations, [p.name for p in plans]),
        messages=[{"role": m.role, "content": m.content} for m in messages],
        tools=TRIP_TOOLS,
        max_tokens=CHAT_MAX_TOKENS,
    )

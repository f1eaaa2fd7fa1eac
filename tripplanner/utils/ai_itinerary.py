import re
import uuid
from datetime import date
from typing import Any, Dict, Optional

from tripplanner.schemas.ai.itinerary_parse import ParsedItinerary, ParseTripContext

LOCATION_CATEGORIES = [
    "restaurant", "attraction", "shopping", "nature", "temple",
    "hotel", "transport", "medical", "playground",
]


def build_parser_prompt(trip_context: Optional[ParseTripContext]) -> str:
    if trip_context is None:
        today = date.today().isoformat()
        trip_context = ParseTripContext(start_date=today, end_date=today)

    return (
        f"You are a travel itinerary parser. Your task is to extract structured data from\n"
        f"raw text that users paste from various sources (TripIt, ChatGPT, emails, etc.).\n\n"

        f"TRIP CONTEXT:\n"
        f"- Trip Name: {trip_context.name}\n"
        f"- Destination: {trip_context.destination or 'Not specified'}\n"
        f"- Dates: {trip_context.start_date} to {trip_context.end_date}\n"
        f"- Travelers: {trip_context.traveler_info or 'Not specified'}\n\n"

        f"INSTRUCTIONS:\n\n"
        f"1. EXTRACT LOCATIONS\n"
        f"   - Identify all places mentioned (hotels, restaurants, attractions, etc.)\n"
        f"   - Give the most accurate coordinates you know for each location\n"
        f"   - Categorize appropriately: {', '.join(LOCATION_CATEGORIES)}\n"
        f"   - If address is provided, use it to improve accuracy\n\n"

        f"2. EXTRACT SCHEDULE\n"
        f"   - Group activities by day\n"
        f"   - Parse times from various formats:\n"
        f'     - "3:00 PM" -> "15:00"\n'
        f'     - "15:00 GMT+8" -> "15:00" (strip timezone)\n'
        f'     - "morning" -> "09:00"\n'
        f'     - "afternoon" -> "14:00"\n'
        f'     - "evening" -> "18:00"\n'
        f'     - "night" -> "20:00"\n'
        f"   - Infer end times if not provided:\n"
        f'     - Use duration hints if available (e.g., "2 hours")\n'
        f"     - Default to 2 hours for activities\n"
        f'     - Use "Until X:XX" format for explicit end times\n'
        f'   - Handle date formats: "Dec 21", "21 Dec", "2025-12-21", "December 21"\n\n'

        f"3. HANDLE AMBIGUITY\n"
        f"   - If year not specified, use the trip dates to infer\n"
        f"   - If date unclear, add a warning\n"
        f'   - If location cannot be found, mark confidence as "low"\n'
        f"   - If coordinates seem wrong (e.g., wrong country), add a warning\n\n"

        f"4. OUTPUT\n"
        f"   Use the parse_itinerary tool to return structured data.\n"
        f"   Include warnings for any issues encountered.\n"
        f"   Include helpful suggestions for improving the itinerary.\n\n"

        f"EXAMPLE INPUT:\n"
        f'"Sun, 21 Dec 16:30 GMT+8 Aeon Mall - grocery shopping\n'
        f'Jalan Jejaka, Maluri Until 19:00 GMT+8"\n\n'

        f"EXAMPLE OUTPUT:\n"
        f"- Location: Aeon Mall Maluri (3.1234, 101.7234), category: shopping, confidence: high\n"
        f'- Activity: Dec 21, 16:30-19:00, "Aeon Mall Maluri", notes: "grocery shopping"'
    )


PARSE_ITINERARY_TOOL = {
    "name": "parse_itinerary",
    "description": "Return the parsed itinerary data with locations and schedule. "
                   "Use this tool to output your final parsing results.",
    "input_schema": {
        "type": "object",
        "properties": {
            "locations": {
                "type": "array",
                "description": "All locations extracted from the itinerary",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string", "description": "Name of the place"},
                        "lat": {"type": "number", "description": "Latitude coordinate"},
                        "lng": {"type": "number", "description": "Longitude coordinate"},
                        "category": {"type": "string", "enum": LOCATION_CATEGORIES},
                        "description": {"type": "string", "description": "Brief description of the place"},
                        "confidence": {
                            "type": "string",
                            "enum": ["high", "medium", "low"],
                            "description": "high if coordinates are verified, low if uncertain",
                        },
                        "original_text": {"type": "string", "description": "The original text that was parsed"},
                    },
                    "required": ["name", "lat", "lng", "category", "confidence", "original_text"],
                },
            },
            "days": {
                "type": "array",
                "description": "Days with scheduled activities",
                "items": {
                    "type": "object",
                    "properties": {
                        "date": {"type": "string", "description": "Date in YYYY-MM-DD format"},
                        "title": {"type": "string", "description": "Theme for the day (optional)"},
                        "activities": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "location_name": {"type": "string",
                                                      "description": "Name of the place (must match a location)"},
                                    "start_time": {"type": "string", "description": "HH:MM, 24-hour"},
                                    "end_time": {"type": "string", "description": "HH:MM, 24-hour"},
                                    "notes": {"type": "string"},
                                    "is_flexible": {"type": "boolean"},
                                    "original_text": {"type": "string"},
                                },
                                "required": ["location_name", "start_time", "end_time", "original_text"],
                            },
                        },
                    },
                    "required": ["date", "activities"],
                },
            },
            "warnings": {"type": "array", "items": {"type": "string"}},
            "suggestions": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["locations", "days", "warnings", "suggestions"],
    },
}


def extract_json_string(raw_text: str) -> str:
    # Remove markdown-style code block
    cleaned = raw_text.strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```(?:json)?", "", cleaned)
        cleaned = re.sub(r"```$", "", cleaned.strip())
    return cleaned.strip()


def attach_ids(raw: Dict[str, Any]) -> ParsedItinerary:
    """Give every location and activity a fresh id and link activities to locations by name."""
    locations = [{**loc, "id": str(uuid.uuid4())} for loc in raw.get("locations") or []]
    name_to_id = {str(loc.get("name", "")).lower(): loc["id"] for loc in locations}

    days = []
    for day in raw.get("days") or []:
        activities = []
        for activity in day.get("activities") or []:
            is_flexible = activity.get("is_flexible")
            activities.append({
                **activity,
                "id": str(uuid.uuid4()),
                "location_id": name_to_id.get(str(activity.get("location_name") or "").lower(), ""),
                "is_flexible": True if is_flexible is None else is_flexible,
            })
        days.append({**day, "activities": activities})

    return ParsedItinerary.model_validate({
        "locations": locations,
        "days": days,
        "warnings": raw.get("warnings") or [],
        "suggestions": raw.get("suggestions") or [],
    })

import pytest

from tripplanner.core.exceptions import AccessDenied, InvalidArgument
from tripplanner.schemas.ai.chat import ChatMessage
from tripplanner.schemas.ai.itinerary_parse import ParseItineraryRequest, ParseTripContext
from tripplanner.schemas.trip.location import LocationCreate
from tripplanner.services.ai import chat_service
from tripplanner.services.ai.itinerary_parser import parse_itinerary
from tripplanner.services.trips import location_service
from tripplanner.utils.ai_itinerary import extract_json_string

ITINERARY_TEXT = (
    "Sun, 21 Dec 16:30 GMT+8 Aeon Mall - grocery shopping\n"
    "Jalan Jejaka, Maluri Until 19:00 GMT+8\n"
    "Mon, 22 Dec morning Zoo Negara"
)


def parsed_tool_response(payload):
    return {"content": [
        {"type": "text", "text": "Parsed."},
        {"type": "tool_use", "id": "toolu_p", "name": "parse_itinerary", "input": payload},
    ], "stop_reason": "tool_use"}


async def test_chat_sends_trip_context_and_tools(store, make_user, make_trip, fake_llm):
    owner = await make_user()
    trip = await make_trip(owner, destination="Kuala Lumpur", traveler_info="2 adults, 1 toddler")
    await location_service.add_location(
        store, trip.id, LocationCreate(name="KLCC Park", lat=3.153, lng=101.714, category="nature"), owner
    )
    response = await chat_service.chat(store, fake_llm, trip.id, [ChatMessage(role="user", content="Ideas?")], owner)

    assert response["content"][0]["text"] == "Happy to help!"
    call = fake_llm.calls[0]
    assert [t["name"] for t in call["tools"]] == ["add_trip_locations", "create_itinerary"]
    assert "Kuala Lumpur" in call["system"]
    assert "KLCC Park (nature)" in call["system"]
    assert "Plan A, Plan B" in call["system"]
    assert call["messages"] == [{"role": "user", "content": "Ideas?"}]


async def test_chat_requires_membership(store, make_user, make_trip, fake_llm):
    owner = await make_user()
    stranger = await make_user()
    trip = await make_trip(owner)

    with pytest.raises(AccessDenied):
        await chat_service.chat(store, fake_llm, trip.id, [ChatMessage(role="user", content="Hi")], stranger)


@pytest.mark.parametrize("raw_text, message", [
    (None, "Please paste your itinerary text"),
    ("", "Please paste your itinerary text"),
    ("Zoo on Monday", "This doesn't look like a full itinerary. Please paste more text."),
])
async def test_parser_rejects_missing_or_short_text(fake_llm, raw_text, message):
    with pytest.raises(InvalidArgument) as exc_info:
        await parse_itinerary(fake_llm, ParseItineraryRequest(raw_text=raw_text))
    assert exc_info.value.detail == message
    assert fake_llm.calls == []


async def test_parser_without_tool_call_fails(fake_llm):
    with pytest.raises(InvalidArgument, match="Could not parse the itinerary"):
        await parse_itinerary(fake_llm, ParseItineraryRequest(raw_text=ITINERARY_TEXT))


async def test_parser_attaches_ids_and_links_locations(fake_llm):
    fake_llm.tool_responses = [parsed_tool_response({
        "locations": [
            {"name": "Aeon Mall Maluri", "lat": 3.1234, "lng": 101.7234, "category": "shopping",
             "confidence": "high", "original_text": "Aeon Mall"},
            {"name": "Zoo Negara", "lat": 3.2099, "lng": 101.7583, "category": "attraction",
             "confidence": "medium", "original_text": "Zoo Negara"},
        ],
        "days": [
            {"date": "2025-12-21", "activities": [
                {"location_name": "aeon mall maluri", "start_time": "16:30", "end_time": "19:00",
                 "notes": "grocery shopping", "original_text": "Sun, 21 Dec 16:30"},
            ]},
            {"date": "2025-12-22", "activities": [
                {"location_name": "Somewhere new", "start_time": "09:00", "end_time": "11:00",
                 "is_flexible": False, "original_text": "morning"},
            ]},
        ],
        "warnings": ["Year inferred from trip dates"],
        "suggestions": [],
    })]

    parsed = await parse_itinerary(fake_llm, ParseItineraryRequest(
        raw_text=ITINERARY_TEXT,
        trip_context=ParseTripContext(name="KL", destination="Kuala Lumpur",
                                      start_date="2025-12-21", end_date="2026-01-06"),
    ))

    aeon, zoo = parsed.locations
    assert aeon.id and zoo.id and aeon.id != zoo.id
    first, second = parsed.days[0].activities[0], parsed.days[1].activities[0]
    assert first.location_id == aeon.id
    assert first.is_flexible is True
    assert second.location_id == ""
    assert second.is_flexible is False
    assert parsed.warnings == ["Year inferred from trip dates"]
    assert "Kuala Lumpur" in fake_llm.calls[0]["system"]


async def test_parser_invalid_tool_payload_fails(fake_llm):
    fake_llm.tool_responses = [parsed_tool_response({"locations": [{"name": "No coordinates"}]})]
    with pytest.raises(InvalidArgument, match="Could not parse the itinerary"):
        await parse_itinerary(fake_llm, ParseItineraryRequest(raw_text=ITINERARY_TEXT))


def test_extract_json_string_strips_fences():
    assert extract_json_string('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert extract_json_string('```\n[1]\n```') == "[1]"
    assert extract_json_string('  {"b": 2} ') == '{"b": 2}'

from pydantic import ValidationError

from tripplanner.core.exceptions import InvalidArgument
from tripplanner.core.llm_client import LLMGateway
from tripplanner.core.logger import logger
from tripplanner.schemas.ai.itinerary_parse import ParseItineraryRequest, ParsedItinerary
from tripplanner.utils.ai_itinerary import PARSE_ITINERARY_TOOL, attach_ids, build_parser_prompt

MIN_ITINERARY_LENGTH = 50
PARSER_MAX_TOKENS = 8192


async def parse_itinerary(llm: LLMGateway, request: ParseItineraryRequest) -> ParsedItinerary:
    """Turn pasted free text into locations and days. Nothing is written to the database."""
    raw_text = request.raw_text
    if not raw_text or not isinstance(raw_text, str):
        raise InvalidArgument("Please paste your itinerary text")
    if len(raw_text) < MIN_ITINERARY_LENGTH:
        raise InvalidArgument("This doesn't look like a full itinerary. Please paste more text.")

    response = await llm.complete_with_tools(
        system=build_parser_prompt(request.trip_context),
        messages=[{
            "role": "user",
            "content": "Please parse this itinerary and extract all locations with coordinates "
                       f"and the daily schedule:\n\n{raw_text}",
        }],
        tools=[PARSE_ITINERARY_TOOL],
        max_tokens=PARSER_MAX_TOKENS,
    )

    tool_input = next(
        (block.get("input") for block in response["content"]
         if block.get("type") == "tool_use" and block.get("name") == PARSE_ITINERARY_TOOL["name"]),
        None,
    )
    if not isinstance(tool_input, dict):
        logger.warning("⚠️ Itinerary parser response had no usable parse_itinerary call")
        raise InvalidArgument("Could not parse the itinerary. Please check the format and try again.")

    try:
        parsed = attach_ids(tool_input)
    except ValidationError as e:
        logger.warning(f"⚠️ Parsed itinerary failed validation: {e.error_count()} error(s)")
        raise InvalidArgument("Could not parse the itinerary. Please check the format and try again.")

    logger.info(f"✅ Parsed itinerary: {len(parsed.locations)} locations, {len(parsed.days)} days")
    return parsed

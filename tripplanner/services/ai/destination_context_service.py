import json
import re
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from tripplanner.core.cache import RedisCache
from tripplanner.core.data_store import TripDataStore
from tripplanner.core.database import utcnow
from tripplanner.core.exceptions import InvalidArgument, UpstreamServiceError
from tripplanner.core.llm_client import LLMGateway
from tripplanner.core.logger import logger
from tripplanner.models.ai.destination_context import DestinationContext
from tripplanner.schemas.ai.destination_context import DestinationContextData
from tripplanner.utils.ai_itinerary import extract_json_string
from tripplanner.utils.generation import RequestGeneration

COUNTRY_CODE_PATTERN = re.compile(r"^[A-Z]{2}$")
CONTEXT_MAX_TOKENS = 1024

SYSTEM_PROMPT = "You are a travel information assistant. Reply with JSON only."


def normalize_country_code(country_code: str) -> str:
    code = (country_code or "").strip().upper()
    if not COUNTRY_CODE_PATTERN.match(code):
        raise InvalidArgument("Country code must be a 2-letter ISO code")
    return code


def _cache_key(country_code: str) -> str:
    return RedisCache.build_key("destination_context", country_code)


def build_context_prompt(country_code: str, country_name: str) -> str:
    return (
        f"Generate travel information for {country_name} (country code: {country_code}).\n\n"
        f"Return a JSON object with this exact structure (no markdown, just JSON):\n"
        f"{{\n"
        f'  "country": {{\n'
        f'    "name": "Full country name",\n'
        f'    "code": "ISO 2-letter code",\n'
        f'    "timezone": "IANA timezone (e.g., Asia/Tokyo)"\n'
        f"  }},\n"
        f'  "emergency": {{\n'
        f'    "police": "Emergency police number",\n'
        f'    "ambulance": "Emergency ambulance number",\n'
        f'    "fire": "Emergency fire number"\n'
        f"  }},\n"
        f'  "safety": {{\n'
        f'    "healthTips": ["4-5 health/medical tips for travelers"],\n'
        f'    "culturalEtiquette": ["4-5 cultural etiquette tips"]\n'
        f"  }},\n"
        f'  "weather": {{\n'
        f'    "climate": "Brief climate description",\n'
        f'    "packingTips": ["4-5 packing recommendations"]\n'
        f"  }},\n"
        f'  "currency": {{\n'
        f'    "code": "ISO currency code (e.g., JPY)",\n'
        f'    "symbol": "Currency symbol (e.g., ¥)"\n'
        f"  }}\n"
        f"}}\n\n"
        f"Be accurate and practical. Focus on information travelers actually need."
    )


async def get_by_country_code(store: TripDataStore, cache: RedisCache, country_code: str) -> Optional[dict]:
    """Cached context for a country, or None. Entries never expire."""
    code = normalize_country_code(country_code)
    key = _cache_key(code)

    cached = await cache.get(key)
    if cached:
        logger.info(f"Destination context cache hit for {code}")
        return cached

    row = await store.first(DestinationContext, DestinationContext.country_code == code)
    if not row:
        return None
    await cache.set(key, row.context, expire=None)
    return row.context


async def generate_context(store: TripDataStore, cache: RedisCache, llm: LLMGateway,
                           country_code: str, country_name: str) -> dict:
    code = normalize_country_code(country_code)
    name = (country_name or "").strip()
    if not name:
        raise InvalidArgument("Country name cannot be empty")

    raw = await llm.complete_text(SYSTEM_PROMPT, build_context_prompt(code, name), max_tokens=CONTEXT_MAX_TOKENS)
    try:
        data = DestinationContextData.model_validate(json.loads(extract_json_string(raw)))
    except json.JSONDecodeError:
        logger.error(f"❌ LLM returned invalid JSON for destination context {code}")
        raise UpstreamServiceError("AI returned an unreadable destination context")
    except ValidationError as e:
        logger.error(f"❌ Destination context for {code} failed validation: {e.error_count()} error(s)")
        raise UpstreamServiceError("AI returned an incomplete destination context")

    context = data.model_dump(by_alias=True)
    row = await store.first(DestinationContext, DestinationContext.country_code == code)
    if row:
        await store.patch(row, context=context, generated_at=utcnow())
    else:
        await store.insert(DestinationContext(country_code=code, context=context))
    await store.commit()

    await cache.set(_cache_key(code), context, expire=None)
    logger.info(f"✅ Destination context generated for {code}")
    return context


ContextFetcher = Callable[[str, str], Awaitable[Optional[dict]]]


class DestinationContextLoader:
    """Keeps the context for whichever country was asked for last.

    A fetch that finishes after a newer ``load`` started is dropped, so a
    slow answer for one country never overwrites a faster one for another.
    """

    def __init__(self, fetch: ContextFetcher):
        self.fetch = fetch
        self.generation = RequestGeneration()
        self.country_code: Optional[str] = None
        self.context: Optional[dict] = None
        self.is_loading = False

    async def load(self, country_code: str, country_name: str) -> Optional[dict]:
        token = self.generation.begin()
        self.is_loading = True
        try:
            result = await self.fetch(country_code, country_name)
        finally:
            if self.generation.is_current(token):
                self.is_loading = False

        if not self.generation.is_current(token):
            logger.info(f"Discarding stale destination context for {country_code}")
            return None
        self.country_code = country_code.upper()
        self.context = result
        return result

    def cancel(self) -> None:
        self.generation.invalidate()
        self.is_loading = False

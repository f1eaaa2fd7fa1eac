from typing import Optional

from fastapi import APIRouter, Depends

from tripplanner.core.cache import RedisCache
from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.core.llm_client import LLMGateway, get_llm_gateway
from tripplanner.core.redis_lifecyle import get_cache
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.ai.destination_context import DestinationContextData, GenerateContextRequest
from tripplanner.services.ai import destination_context_service

router = APIRouter(prefix="/destination-contexts", tags=["Destination Context"])


@router.get("/{country_code}", response_model=Optional[DestinationContextData])
async def get_destination_context_route(
    country_code: str,
    store: TripDataStore = Depends(get_store),
    cache: RedisCache = Depends(get_cache),
    current_user: User = Depends(get_current_user)
):
    return await destination_context_service.get_by_country_code(store, cache, country_code)


@router.post("/generate", response_model=DestinationContextData)
async def generate_destination_context_route(
    data: GenerateContextRequest,
    store: TripDataStore = Depends(get_store),
    cache: RedisCache = Depends(get_cache),
    llm: LLMGateway = Depends(get_llm_gateway),
    current_user: User = Depends(get_current_user)
):
    return await destination_context_service.generate_context(
        store, cache, llm, data.country_code, data.country_name
    )

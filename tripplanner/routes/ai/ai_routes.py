from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.core.exceptions import TripPlannerError
from tripplanner.core.llm_client import LLMGateway, get_llm_gateway
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.ai.chat import ChatMessage, ChatMessageOut, ChatRequest, ChatResponse, ClearedResponse
from tripplanner.schemas.ai.itinerary_parse import ParseItineraryRequest, ParseItineraryResponse
from tripplanner.schemas.ai.tool_calls import ToolBatchRequest, ToolBatchResponse, UndoRequest
from tripplanner.schemas.common import SuccessResponse
from tripplanner.services.ai import chat_history_service, chat_service
from tripplanner.services.ai.itinerary_parser import parse_itinerary
from tripplanner.services.ai.tool_executor import AIToolExecutor

router = APIRouter(tags=["AI Assistant"])


@router.post("/trips/{trip_id}/ai/chat", response_model=ChatResponse)
async def chat_route(
    trip_id: str,
    data: ChatRequest,
    store: TripDataStore = Depends(get_store),
    llm: LLMGateway = Depends(get_llm_gateway),
    current_user: User = Depends(get_current_user)
):
    return await chat_service.chat(store, llm, trip_id, data.messages, current_user)


@router.get("/trips/{trip_id}/ai/messages", response_model=List[ChatMessageOut])
async def get_chat_messages_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await chat_history_service.get_messages(store, trip_id, current_user)


@router.post("/trips/{trip_id}/ai/messages", response_model=ChatMessageOut, status_code=status.HTTP_201_CREATED)
async def add_chat_message_route(
    trip_id: str,
    data: ChatMessage,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await chat_history_service.add_message(store, trip_id, data, current_user)


@router.delete("/trips/{trip_id}/ai/messages", response_model=ClearedResponse)
async def clear_chat_messages_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await chat_history_service.clear_messages(store, trip_id, current_user)


@router.post("/trips/{trip_id}/ai/tool-calls", response_model=ToolBatchResponse)
async def process_tool_calls_route(
    trip_id: str,
    data: ToolBatchRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    executor = AIToolExecutor(store)
    return await executor.process_tool_calls(trip_id, current_user, data.content)


@router.post("/trips/{trip_id}/ai/undo", response_model=SuccessResponse)
async def undo_tool_call_route(
    trip_id: str,
    data: UndoRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    executor = AIToolExecutor(store)
    return await executor.undo(trip_id, current_user, data.undo_action)


@router.post("/ai/parse-itinerary", response_model=ParseItineraryResponse)
async def parse_itinerary_route(
    data: ParseItineraryRequest,
    llm: LLMGateway = Depends(get_llm_gateway),
    current_user: User = Depends(get_current_user)
):
    try:
        parsed = await parse_itinerary(llm, data)
    except TripPlannerError as e:
        return JSONResponse(status_code=e.status_code, content={"success": False, "error": e.detail})
    return ParseItineraryResponse(success=True, parsed=parsed)

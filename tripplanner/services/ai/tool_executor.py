from typing import Any, Dict, List

from pydantic import ValidationError

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import InvalidArgument, NoDefaultPlan, NotFound, TripPlannerError
from tripplanner.core.logger import logger
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.trips.trip_plan import TripPlan
from tripplanner.models.user.user import User
from tripplanner.schemas.ai.tool_calls import (
    AddTripLocationsInput,
    BatchStatus,
    CreateItineraryInput,
    ToolBatchResponse,
    ToolCallResult,
    UndoAction,
)
from tripplanner.services.itineraries.schedule_service import delete_schedule_items, insert_ai_itinerary
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.location_service import delete_locations, insert_ai_locations
from tripplanner.services.trips.plan_service import get_default_plan

ADD_TRIP_LOCATIONS = "add_trip_locations"
CREATE_ITINERARY = "create_itinerary"


def batch_status(results: List[ToolCallResult]) -> BatchStatus:
    succeeded = sum(1 for r in results if r.success)
    if succeeded == len(results):
        return BatchStatus.OK
    if succeeded == 0:
        return BatchStatus.FAILED
    return BatchStatus.PARTIAL_FAILURE


class AIToolExecutor:
    """Runs the tool calls of one AI response against a trip.

    Calls run one at a time in response order. Each successful call is
    committed on its own, so a later failure never undoes an earlier
    success; the returned ``undo_action`` is the only way back.
    """

    def __init__(self, store: TripDataStore):
        self.store = store
        self.is_processing_tools = False
        self.last_tool_results: List[ToolCallResult] = []

    async def process_tool_calls(self, trip_id: str, user: User, content: List[Dict[str, Any]]) -> ToolBatchResponse:
        handlers = {
            ADD_TRIP_LOCATIONS: self._add_trip_locations,
            CREATE_ITINERARY: self._create_itinerary,
        }
        user_id = user.id
        results: List[ToolCallResult] = []
        self.is_processing_tools = True
        try:
            for block in content:
                name = block.get("name")
                if block.get("type") != "tool_use" or name not in handlers:
                    continue
                try:
                    result = await handlers[name](trip_id, user, block.get("input"))
                    await self.store.commit()
                except ValidationError as e:
                    await self.store.rollback()
                    logger.warning(f"⚠️ Invalid {name} input for trip {trip_id}: {e.error_count()} error(s)")
                    result = ToolCallResult(tool_name=name, success=False, message=f"Invalid input for {name}")
                except TripPlannerError as e:
                    await self.store.rollback()
                    logger.warning(f"⚠️ Tool call {name} failed for trip {trip_id}: {e.detail}")
                    result = ToolCallResult(tool_name=name, success=False, message=e.detail)
                except Exception:
                    await self.store.rollback()
                    logger.exception(f"🔥 Unexpected error running {name} for trip {trip_id}")
                    result = ToolCallResult(tool_name=name, success=False,
                                            message=f"Something went wrong running {name}")

                result.tool_use_id = block.get("id")
                results.append(result)
                # rollback expires loaded rows; reload the caller for the next call
                user = await self.store.get(User, user_id)
        finally:
            self.is_processing_tools = False

        self.last_tool_results = results
        status = batch_status(results)
        logger.info(f"AI tool batch for trip {trip_id}: {len(results)} call(s), status={status.value}")
        return ToolBatchResponse(status=status, results=results)

    async def _add_trip_locations(self, trip_id: str, user: User, payload) -> ToolCallResult:
        data = AddTripLocationsInput.model_validate(payload)
        await check_access(self.store, trip_id, user, TripRole.EDITOR, lock=True)
        ids = await insert_ai_locations(self.store, trip_id, data.locations, user)
        return ToolCallResult(
            tool_name=ADD_TRIP_LOCATIONS,
            success=True,
            message=f"Added {len(ids)} locations to your trip",
            created_ids=ids,
            undo_action=UndoAction(kind="remove_locations", ids=ids),
        )

    async def _create_itinerary(self, trip_id: str, user: User, payload) -> ToolCallResult:
        data = CreateItineraryInput.model_validate(payload)
        await check_access(self.store, trip_id, user, TripRole.EDITOR, lock=True)

        if data.plan_id:
            plan = await self.store.get(TripPlan, data.plan_id)
            if not plan or plan.trip_id != trip_id:
                raise NotFound("Plan not found")
        else:
            plan = await get_default_plan(self.store, trip_id)
            if not plan:
                raise NoDefaultPlan()

        ids = await insert_ai_itinerary(self.store, plan, data.days, user)
        return ToolCallResult(
            tool_name=CREATE_ITINERARY,
            success=True,
            message=f"Created itinerary with {len(ids)} activities",
            created_ids=ids,
            undo_action=UndoAction(kind="delete_schedule_items", ids=ids),
        )

    async def undo(self, trip_id: str, user: User, action: UndoAction) -> dict:
        """Reverse one earlier tool call by deleting exactly the ids it created."""
        if action.kind == "remove_locations":
            await delete_locations(self.store, action.ids, user, trip_id=trip_id)
        elif action.kind == "delete_schedule_items":
            await delete_schedule_items(self.store, action.ids, user, trip_id=trip_id)
        else:
            raise InvalidArgument(f"Unknown undo action '{action.kind}'")
        await self.store.commit()
        logger.info(f"Undid {action.kind} of {len(action.ids)} item(s) on trip {trip_id}")
        return {"success": True}

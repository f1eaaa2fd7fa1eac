from typing import List

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import InvariantViolation, NotFound
from tripplanner.core.logger import logger
from tripplanner.models.itinerary.schedule_item import TripScheduleItem
from tripplanner.models.trips.trip_comment import TripComment
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.trips.trip_plan import TripPlan
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.plan import PlanCreate, PlanUpdate
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.activity_service import ActivityAction, log_activity
from tripplanner.utils import ordering
from tripplanner.utils.validators import clean_name


async def trip_plans(store: TripDataStore, trip_id: str) -> List[TripPlan]:
    plans = await store.query(TripPlan, TripPlan.trip_id == trip_id)
    return ordering.sorted_scope(plans)


async def get_default_plan(store: TripDataStore, trip_id: str):
    """The plan flagged is_default, or None. Never inferred from position."""
    return await store.first(TripPlan, TripPlan.trip_id == trip_id, TripPlan.is_default.is_(True))


async def _get_plan(store: TripDataStore, plan_id: str) -> TripPlan:
    """Mutations call this again once the trip is locked, to decide on fresh values."""
    plan = await store.get(TripPlan, plan_id)
    if not plan:
        raise NotFound("Plan not found")
    return plan


async def get_plans(store: TripDataStore, trip_id: str, user: User) -> List[TripPlan]:
    await check_access(store, trip_id, user)
    return await trip_plans(store, trip_id)


async def get_plan(store: TripDataStore, plan_id: str, user: User) -> dict:
    plan = await _get_plan(store, plan_id)
    await check_access(store, plan.trip_id, user)
    items = await store.query(
        TripScheduleItem,
        TripScheduleItem.plan_id == plan_id,
        order_by=[TripScheduleItem.day_date, TripScheduleItem.order, TripScheduleItem.created_at, TripScheduleItem.id],
    )
    return {"plan": plan, "schedule_items": items}


async def create_plan(store: TripDataStore, trip_id: str, data: PlanCreate, user: User) -> TripPlan:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    existing = await trip_plans(store, trip_id)

    plan = await store.insert(TripPlan(
        trip_id=trip_id,
        name=clean_name(data.name, "Plan name"),
        color=data.color,
        description=data.description,
        icon=data.icon,
        created_by=user.id,
        order=ordering.next_order(existing),
        # a trip with no plans gets its first one as default
        is_default=not existing,
    ))
    await log_activity(store, trip_id, user.id, ActivityAction.CREATED_PLAN,
                       target_id=plan.id, target_type="plan", metadata={"plan_name": plan.name})
    await store.commit()
    logger.info(f"Plan {plan.id} created in trip {trip_id} by user {user.id}")
    return plan


async def update_plan(store: TripDataStore, plan_id: str, data: PlanUpdate, user: User) -> TripPlan:
    plan = await _get_plan(store, plan_id)
    await check_access(store, plan.trip_id, user, TripRole.EDITOR, lock=True)
    plan = await _get_plan(store, plan_id)

    fields = data.model_dump(exclude_unset=True)
    if "name" in fields:
        fields["name"] = clean_name(fields["name"], "Plan name")
    await store.patch(plan, **fields)
    await log_activity(store, plan.trip_id, user.id, ActivityAction.UPDATED_PLAN,
                       target_id=plan.id, target_type="plan", metadata={"plan_name": plan.name})
    await store.commit()
    logger.info(f"Plan {plan_id} updated by user {user.id}")
    return plan


async def delete_plan(store: TripDataStore, plan_id: str, user: User) -> dict:
    """Delete a non-default plan along with its schedule items and their comments."""
    plan = await _get_plan(store, plan_id)
    trip_id = plan.trip_id
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    plan = await _get_plan(store, plan_id)

    plans = await trip_plans(store, trip_id)
    if len(plans) <= 1:
        raise InvariantViolation("at least one plan required")
    if plan.is_default:
        raise InvariantViolation("must reassign default first")

    item_ids = [i.id for i in await store.query(TripScheduleItem, TripScheduleItem.plan_id == plan_id)]
    if item_ids:
        await store.delete_where(TripComment, TripComment.schedule_item_id.in_(item_ids))
    await store.delete_where(TripComment, TripComment.plan_id == plan_id)
    await store.delete_where(TripScheduleItem, TripScheduleItem.plan_id == plan_id)
    await store.delete(plan)

    await ordering.close_gaps(store, [p for p in plans if p.id != plan_id])
    await log_activity(store, trip_id, user.id, ActivityAction.DELETED_PLAN,
                       target_id=plan_id, target_type="plan",
                       metadata={"plan_name": plan.name, "deleted_items": len(item_ids)})
    await store.commit()
    logger.info(f"Plan {plan_id} and {len(item_ids)} schedule items deleted by user {user.id}")
    return {"success": True}


async def reorder_plans(store: TripDataStore, trip_id: str, ordered_ids: List[str], user: User) -> dict:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    plans = await trip_plans(store, trip_id)
    await ordering.reorder(store, plans, ordered_ids)
    await log_activity(store, trip_id, user.id, ActivityAction.REORDERED_PLANS, target_type="plan")
    await store.commit()
    logger.info(f"Plans of trip {trip_id} reordered by user {user.id}")
    return {"success": True}


async def set_default_plan(store: TripDataStore, plan_id: str, user: User) -> dict:
    """Move the default flag to this plan; the clear and the set commit together."""
    plan = await _get_plan(store, plan_id)
    await check_access(store, plan.trip_id, user, TripRole.EDITOR, lock=True)
    plan = await _get_plan(store, plan_id)

    for other in await trip_plans(store, plan.trip_id):
        if other.id != plan.id and other.is_default:
            await store.patch(other, is_default=False)
    if not plan.is_default:
        await store.patch(plan, is_default=True)

    await log_activity(store, plan.trip_id, user.id, ActivityAction.SET_DEFAULT_PLAN,
                       target_id=plan.id, target_type="plan", metadata={"plan_name": plan.name})
    await store.commit()
    logger.info(f"Plan {plan_id} is now the default of trip {plan.trip_id}")
    return {"success": True}

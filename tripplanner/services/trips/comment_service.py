from typing import Dict, List, Optional

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import AccessDenied, InvalidArgument, NotFound
from tripplanner.core.logger import logger
from tripplanner.models.itinerary.schedule_item import TripScheduleItem
from tripplanner.models.trips.trip_comment import TripComment
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.trips.trip_plan import TripPlan
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.comment import CommentCreate
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.activity_service import ActivityAction, log_activity
from tripplanner.utils.validators import validate_day_date


_COMMENT_FIELDS = (
    "id", "trip_id", "plan_id", "schedule_item_id", "day_date", "author_id",
    "content", "is_resolved", "created_at", "updated_at",
)


def _clean_content(content: Optional[str]) -> str:
    cleaned = (content or "").strip()
    if not cleaned:
        raise InvalidArgument("Comment cannot be empty")
    return cleaned


async def _get_comment(store: TripDataStore, comment_id: str) -> TripComment:
    comment = await store.get(TripComment, comment_id)
    if not comment:
        raise NotFound("Comment not found")
    return comment


async def _with_authors(store: TripDataStore, comments: List[TripComment]) -> List[dict]:
    authors = await store.by_ids(User, [c.author_id for c in comments])
    result = []
    for comment in comments:
        author = authors.get(comment.author_id)
        result.append({
            **{f: getattr(comment, f) for f in _COMMENT_FIELDS},
            "author": author.to_profile() if author else None,
        })
    return result


async def add_comment(store: TripDataStore, trip_id: str, data: CommentCreate, user: User) -> dict:
    await check_access(store, trip_id, user, TripRole.COMMENTER, lock=True)
    content = _clean_content(data.content)

    plan_id = data.plan_id
    if data.schedule_item_id:
        item = await store.get(TripScheduleItem, data.schedule_item_id)
        if not item or item.trip_id != trip_id:
            raise InvalidArgument("Schedule item does not belong to this trip")
        plan_id = plan_id or item.plan_id
    if plan_id:
        plan = await store.get(TripPlan, plan_id)
        if not plan or plan.trip_id != trip_id:
            raise InvalidArgument("Plan does not belong to this trip")
    if data.day_date:
        validate_day_date(data.day_date)

    comment = await store.insert(TripComment(
        trip_id=trip_id,
        plan_id=plan_id,
        schedule_item_id=data.schedule_item_id,
        day_date=data.day_date,
        author_id=user.id,
        content=content,
    ))
    await log_activity(store, trip_id, user.id, ActivityAction.ADDED_COMMENT,
                       target_id=comment.id, target_type="comment",
                       metadata={"schedule_item_id": data.schedule_item_id, "plan_id": plan_id})
    await store.commit()
    logger.info(f"Comment {comment.id} added to trip {trip_id} by user {user.id}")
    return (await _with_authors(store, [comment]))[0]


async def update_comment(store: TripDataStore, comment_id: str, content: str, user: User) -> dict:
    comment = await _get_comment(store, comment_id)
    await check_access(store, comment.trip_id, user, TripRole.COMMENTER, lock=True)
    comment = await _get_comment(store, comment_id)
    if comment.author_id != user.id:
        raise AccessDenied("You can only edit your own comments")

    await store.patch(comment, content=_clean_content(content))
    await log_activity(store, comment.trip_id, user.id, ActivityAction.UPDATED_COMMENT,
                       target_id=comment.id, target_type="comment")
    await store.commit()
    return (await _with_authors(store, [comment]))[0]


async def delete_comment(store: TripDataStore, comment_id: str, user: User) -> dict:
    comment = await _get_comment(store, comment_id)
    access = await check_access(store, comment.trip_id, user, lock=True)
    comment = await _get_comment(store, comment_id)
    if comment.author_id != user.id and access.role != TripRole.OWNER:
        raise AccessDenied("Only the author or the trip owner can delete this comment")

    await store.delete(comment)
    await log_activity(store, comment.trip_id, user.id, ActivityAction.DELETED_COMMENT,
                       target_id=comment_id, target_type="comment")
    await store.commit()
    return {"success": True}


async def set_comment_resolved(store: TripDataStore, comment_id: str, resolved: bool, user: User) -> dict:
    comment = await _get_comment(store, comment_id)
    await check_access(store, comment.trip_id, user, TripRole.EDITOR, lock=True)
    comment = await _get_comment(store, comment_id)

    if comment.is_resolved != resolved:
        await store.patch(comment, is_resolved=resolved)
        action = ActivityAction.RESOLVED_COMMENT if resolved else ActivityAction.UNRESOLVED_COMMENT
        await log_activity(store, comment.trip_id, user.id, action, target_id=comment.id, target_type="comment")
        await store.commit()
    return (await _with_authors(store, [comment]))[0]


async def resolve_comment(store: TripDataStore, comment_id: str, user: User) -> dict:
    return await set_comment_resolved(store, comment_id, True, user)


async def unresolve_comment(store: TripDataStore, comment_id: str, user: User) -> dict:
    return await set_comment_resolved(store, comment_id, False, user)


async def get_comments_by_trip(store: TripDataStore, trip_id: str, user: User,
                               include_resolved: bool = False) -> List[dict]:
    await check_access(store, trip_id, user)
    criteria = [TripComment.trip_id == trip_id]
    if not include_resolved:
        criteria.append(TripComment.is_resolved.is_(False))
    comments = await store.query(TripComment, *criteria,
                                 order_by=[TripComment.created_at.desc(), TripComment.id])
    return await _with_authors(store, comments)


async def get_comments_by_plan(store: TripDataStore, plan_id: str, user: User,
                               include_resolved: bool = False) -> List[dict]:
    plan = await store.get(TripPlan, plan_id)
    if not plan:
        raise NotFound("Plan not found")
    await check_access(store, plan.trip_id, user)
    criteria = [TripComment.plan_id == plan_id]
    if not include_resolved:
        criteria.append(TripComment.is_resolved.is_(False))
    comments = await store.query(TripComment, *criteria,
                                 order_by=[TripComment.created_at.desc(), TripComment.id])
    return await _with_authors(store, comments)


async def get_comments_by_schedule_item(store: TripDataStore, item_id: str, user: User) -> List[dict]:
    """Thread for one activity, oldest first."""
    item = await store.get(TripScheduleItem, item_id)
    if not item:
        raise NotFound("Schedule item not found")
    await check_access(store, item.trip_id, user)
    comments = await store.query(TripComment, TripComment.schedule_item_id == item_id,
                                 order_by=[TripComment.created_at, TripComment.id])
    return await _with_authors(store, comments)


async def get_comment_counts(store: TripDataStore, trip_id: str, user: User,
                             day_date: Optional[str] = None) -> Dict[str, int]:
    """Unresolved comment count per schedule item."""
    await check_access(store, trip_id, user)
    criteria = [
        TripComment.trip_id == trip_id,
        TripComment.schedule_item_id.is_not(None),
        TripComment.is_resolved.is_(False),
    ]
    if day_date:
        item_ids = [i.id for i in await store.query(TripScheduleItem, TripScheduleItem.trip_id == trip_id,
                                                     TripScheduleItem.day_date == day_date)]
        criteria.append(TripComment.schedule_item_id.in_(item_ids))

    counts: Dict[str, int] = {}
    for comment in await store.query(TripComment, *criteria):
        counts[comment.schedule_item_id] = counts.get(comment.schedule_item_id, 0) + 1
    return counts

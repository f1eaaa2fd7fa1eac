from typing import List

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.logger import logger
from tripplanner.models.ai.chat_message import ChatRole, TripChatMessage
from tripplanner.models.user.user import User
from tripplanner.schemas.ai.chat import ChatMessage
from tripplanner.services.trips.access_service import check_access
from tripplanner.utils.validators import clean_name


def _conversation(trip_id: str, user: User) -> tuple:
    return TripChatMessage.trip_id == trip_id, TripChatMessage.user_id == user.id


async def get_messages(store: TripDataStore, trip_id: str, user: User) -> List[TripChatMessage]:
    """The caller's own conversation on this trip, oldest first."""
    await check_access(store, trip_id, user)
    return await store.query(
        TripChatMessage,
        *_conversation(trip_id, user),
        order_by=[TripChatMessage.seq, TripChatMessage.created_at],
    )


async def add_message(store: TripDataStore, trip_id: str, message: ChatMessage, user: User) -> TripChatMessage:
    await check_access(store, trip_id, user, lock=True)
    row = await store.insert(TripChatMessage(
        trip_id=trip_id,
        user_id=user.id,
        role=ChatRole(message.role),
        content=clean_name(message.content, "Message"),
        seq=await store.count(TripChatMessage, *_conversation(trip_id, user)),
    ))
    await store.commit()
    return row


async def clear_messages(store: TripDataStore, trip_id: str, user: User) -> dict:
    await check_access(store, trip_id, user, lock=True)
    removed = await store.delete_where(TripChatMessage, *_conversation(trip_id, user))
    await store.commit()
    logger.info(f"User {user.id} cleared {removed} chat message(s) on trip {trip_id}")
    return {"success": True, "removed": removed}

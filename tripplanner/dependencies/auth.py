from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.core.exceptions import Unauthenticated
from tripplanner.core.security import decode_access_token
from tripplanner.models.user.user import User

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: TripDataStore = Depends(get_store),
) -> User:
    if credentials is None:
        raise Unauthenticated()

    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        raise Unauthenticated("Could not validate credentials")

    user = await store.get(User, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated("Could not validate credentials")
    return user

from sqlalchemy.exc import IntegrityError

from tripplanner.core.config import settings
from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import InvalidArgument, Unauthenticated
from tripplanner.core.logger import logger
from tripplanner.core.security import create_access_token, hash_password, verify_password
from tripplanner.models.user.user import User
from tripplanner.schemas.user.user import TokenResponse, UserCreate, UserOut
from tripplanner.services.trips.trip_member_service import claim_email_invites


def _token_response(user: User) -> TokenResponse:
    token = create_access_token(data={"sub": str(user.id)})
    return TokenResponse(access_token=token, user=UserOut.model_validate(user))


async def register_user(store: TripDataStore, user_data: UserCreate) -> TokenResponse:
    email = user_data.email.lower()
    if await store.first(User, User.email == email):
        raise InvalidArgument("Email already registered")
    if len(user_data.password or "") < settings.PASSWORD_MIN_LENGTH:
        raise InvalidArgument(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")

    name = user_data.name.strip()
    if not name:
        raise InvalidArgument("Name cannot be empty")

    try:
        new_user = await store.insert(User(
            email=email,
            name=name,
            hashed_password=hash_password(user_data.password),
            avatar_url=user_data.avatar_url,
        ))
        await claim_email_invites(store, new_user)
        await store.commit()
    except IntegrityError:
        # Fallback in case of race condition with the lookup above
        await store.rollback()
        raise InvalidArgument("Email already registered")

    logger.info(f"User registered: {new_user.id}")
    return _token_response(new_user)


async def login_user(store: TripDataStore, email: str, password: str) -> TokenResponse:
    user = await store.first(User, User.email == email.lower())
    if not user or not verify_password(password, user.hashed_password):
        raise Unauthenticated("Invalid credentials")
    if not user.is_active:
        raise Unauthenticated("Account is disabled")

    logger.info(f"User logged in: {user.id}")
    return _token_response(user)

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.user.user import TokenResponse, UserCreate, UserLogin, UserOut
from tripplanner.services.auth import auth as auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register_route(
    user: UserCreate,
    store: TripDataStore = Depends(get_store)
):
    return await auth_service.register_user(store, user)


@router.post("/login", response_model=TokenResponse)
async def login_route(
    user_data: UserLogin,
    store: TripDataStore = Depends(get_store)
):
    return await auth_service.login_user(store, user_data.email, user_data.password)


@router.get("/me", response_model=UserOut)
async def me_route(current_user: User = Depends(get_current_user)):
    return current_user

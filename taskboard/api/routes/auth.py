"""
Auth API routes for the Taskboard API
Registration, login, logout and the current user's profile
"""
from fastapi import APIRouter, Depends, status

from ...config import settings
from ...models.user import AuthPayload, PasswordChange, UserCreate, UserLogin, UserPublic
from ...services.identity_service import IdentityService
from ...storage import Store
from ...utils.ratelimit import SlidingWindowLimiter
from ...utils.security import create_access_token
from ..deps import get_current_user_id, get_store
from ..responses import ApiResponse


router = APIRouter()

# Login attempts per email, successful or not
login_rate_limiter = SlidingWindowLimiter(
    max_attempts=settings.login_rate_limit,
    window_seconds=settings.login_rate_window_seconds,
)

# ============ Endpoints ============

@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, store: Store = Depends(get_store)):
    """Create an account with the default categories and return a token."""
    user = IdentityService.register(store, payload)
    return ApiResponse(
        data=AuthPayload(user=UserPublic.model_validate(user), token=create_access_token(user.id)),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[AuthPayload])
def login(payload: UserLogin, store: Store = Depends(get_store)):
    """Exchange email and password for an access token."""
    login_rate_limiter.hit(payload.email)
    user, token = IdentityService.authenticate(store, payload.email, payload.password)
    return ApiResponse(
        data=AuthPayload(user=UserPublic.model_validate(user), token=token),
        message="Login successful",
    )


@router.post("/logout", response_model=ApiResponse)
def logout():
    """Tokens are stateless; the client discards its copy."""
    return ApiResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[UserPublic])
def me(user_id: int = Depends(get_current_user_id), store: Store = Depends(get_store)):
    user = IdentityService.get_profile(store, user_id)
    return ApiResponse(data=UserPublic.model_validate(user))


@router.put("/password", response_model=ApiResponse)
def change_password(
    payload: PasswordChange,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    IdentityService.change_password(store, user_id, payload.current_password, payload.new_password)
    return ApiResponse(message="Password updated successfully")

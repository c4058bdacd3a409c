from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from expat_hub.api.dependencies import (
    get_auth_service,
    get_current_user,
    get_optional_user,
    get_session_cookie,
    get_session_token,
)
from expat_hub.api.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    SuccessResponse,
    UpdateProfileRequest,
    UserView,
    VerifyEmailRequest,
)
from expat_hub.api.session_cookie import SessionCookie
from expat_hub.models.user_account import UserAccount
from expat_hub.services.auth_service import AuthService
from expat_hub.utils.logging_config import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    cookie: SessionCookie = Depends(get_session_cookie),
):
    profile = payload.model_dump(
        exclude={"first_name", "last_name", "email", "password"},
        exclude_none=True,
    )
    user, session = auth_service.register(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
        **profile,
    )
    cookie.attach(response, session)
    return AuthResponse(
        message="Registration successful. Please check your email for verification code.",
        user=UserView.from_account(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    cookie: SessionCookie = Depends(get_session_cookie),
):
    user, session = auth_service.login(email=payload.email, password=payload.password)
    cookie.attach(response, session)
    return AuthResponse(message="Login successful", user=UserView.from_account(user))


@router.get("/me", response_model=MeResponse)
def me(user: Optional[UserAccount] = Depends(get_optional_user)):
    if user is None:
        return MeResponse(user=None, is_authenticated=False)
    return MeResponse(user=UserView.from_account(user), is_authenticated=True)


@router.patch("/me", response_model=UserView)
def update_me(
    payload: UpdateProfileRequest,
    current_user: UserAccount = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    user = auth_service.update_profile(current_user.id, **fields)
    return UserView.from_account(user)


@router.post("/verify", response_model=UserView)
def verify_email(
    payload: VerifyEmailRequest,
    current_user: UserAccount = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = auth_service.verify_email(current_user.id, payload.code)
    return UserView.from_account(user)


@router.post("/password", response_model=SuccessResponse)
def change_password(
    payload: ChangePasswordRequest,
    current_user: UserAccount = Depends(get_current_user),
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.change_password(
        current_user.id,
        current_password=payload.current_password,
        new_password=payload.new_password,
        keep_token=token,
    )
    return SuccessResponse(message="Password updated")


@router.post("/logout", response_model=SuccessResponse)
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
    cookie: SessionCookie = Depends(get_session_cookie),
):
    auth_service.logout(token)
    cookie.clear(response)
    logger.info("Session closed" if token else "Logout without session")
    return SuccessResponse(message="Logged out")

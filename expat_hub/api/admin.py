"""管理后台 API

所有接口要求当前用户为管理员。
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from expat_hub.api.dependencies import get_admin_user, get_user_admin_service
from expat_hub.api.schemas import (
    AdminStatsResponse,
    ResetPasswordRequest,
    UserActionRequest,
    UserListResponse,
    UserView,
)
from expat_hub.models.user_account import UserAccount, UserStatus
from expat_hub.services.user_admin_service import UserAdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=UserListResponse)
def list_users(
    search: Optional[str] = Query(default=None),
    status: Optional[UserStatus] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    admin: UserAccount = Depends(get_admin_user),
    admin_service: UserAdminService = Depends(get_user_admin_service),
):
    users = admin_service.list_users(
        search=search,
        status=status.value if status else None,
        limit=limit,
    )
    return UserListResponse(
        users=[UserView.from_account(user) for user in users],
        total=len(users),
    )


@router.patch("/users", response_model=UserView)
def update_user(
    payload: UserActionRequest,
    admin: UserAccount = Depends(get_admin_user),
    admin_service: UserAdminService = Depends(get_user_admin_service),
):
    user = admin_service.apply_action(payload.user_id, payload.action, actor_id=admin.id)
    return UserView.from_account(user)


@router.post("/users/{user_id}/password", response_model=UserView)
def reset_user_password(
    user_id: int,
    payload: ResetPasswordRequest,
    admin: UserAccount = Depends(get_admin_user),
    admin_service: UserAdminService = Depends(get_user_admin_service),
):
    """重置用户密码，该用户所有会话失效"""
    user = admin_service.reset_password(user_id, payload.new_password)
    return UserView.from_account(user)


@router.get("/stats", response_model=AdminStatsResponse)
def get_stats(
    admin: UserAccount = Depends(get_admin_user),
    admin_service: UserAdminService = Depends(get_user_admin_service),
):
    return AdminStatsResponse(**admin_service.stats())

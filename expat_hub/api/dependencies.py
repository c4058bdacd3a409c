"""请求级依赖注入

流程：从请求中取出 cookie token -> 解析会话 -> 当前用户挂到 request.state 上。
服务对象由应用工厂创建并存放在 app.state 中。
"""
from typing import Optional

from fastapi import Depends, Request

from expat_hub.api.session_cookie import SessionCookie
from expat_hub.models.user_account import UserAccount, UserRole
from expat_hub.services.auth_service import AuthService, ensure_not_blocked
from expat_hub.services.errors import AuthError
from expat_hub.services.user_admin_service import UserAdminService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user_admin_service(request: Request) -> UserAdminService:
    return request.app.state.user_admin_service


def get_session_cookie(request: Request) -> SessionCookie:
    return request.app.state.session_cookie


def get_session_token(
    request: Request,
    cookie: SessionCookie = Depends(get_session_cookie),
) -> Optional[str]:
    return cookie.read(request)


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[UserAccount]:
    """获取当前登录用户，未登录时返回 None"""
    user = auth_service.resolve(token)
    request.state.user_email = user.email if user else "anonymous"
    return user


def get_current_user(user: Optional[UserAccount] = Depends(get_optional_user)) -> UserAccount:
    """获取当前登录用户（依赖注入）

    未登录返回 401；被封禁或暂停的账号即使会话仍有效也返回 403。
    """
    if user is None:
        raise AuthError("Unauthorized")
    ensure_not_blocked(user)
    return user


def get_admin_user(user: Optional[UserAccount] = Depends(get_optional_user)) -> UserAccount:
    """获取管理员用户（依赖注入）

    未登录或非管理员均返回 401。
    """
    if user is None or user.role != UserRole.ADMIN.value:
        raise AuthError("Unauthorized")
    ensure_not_blocked(user)
    return user

from datetime import timezone
from typing import Optional

from fastapi import Request, Response

from expat_hub.models.user_account import UserSession


class SessionCookie:
    """读写携带会话 token 的 cookie

    cookie 值就是 session 表主键，本身不做签名。
    """

    def __init__(self, name: str = "session", secure: bool = False):
        self.name = name
        self.secure = secure

    def read(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.name) or None

    def attach(self, response: Response, session: UserSession) -> None:
        response.set_cookie(
            key=self.name,
            value=session.token,
            expires=session.expires_at.replace(tzinfo=timezone.utc),
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(
            key=self.name,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlmodel import select

from expat_hub.models.db import Database
from expat_hub.models.user_account import UserSession, utcnow

DEFAULT_SESSION_LIFETIME = timedelta(days=30)


class SessionStore:
    """服务端会话存储

    会话有效期在创建时固定，访问时不续期。过期记录不删除，读取时按 expires_at 视为无效。
    """

    def __init__(
        self,
        database: Database,
        lifetime: timedelta = DEFAULT_SESSION_LIFETIME,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.lifetime = lifetime
        self.clock = clock

    def create(self, user_id: int) -> UserSession:
        record = UserSession(
            token=secrets.token_hex(32),
            user_id=user_id,
            expires_at=self.clock() + self.lifetime,
        )
        with self.database.get_session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            return record

    def lookup(self, token: Optional[str]) -> Optional[UserSession]:
        if not token:
            return None
        with self.database.get_session() as session:
            record = session.get(UserSession, token)
        if record is None:
            return None
        if record.expires_at <= self.clock():
            return None
        return record

    def delete(self, token: Optional[str]) -> None:
        if not token:
            return
        with self.database.get_session() as session:
            record = session.get(UserSession, token)
            if record is not None:
                session.delete(record)
                session.commit()

    def delete_for_user(self, user_id: int, keep: Optional[str] = None) -> int:
        """删除用户的所有会话（强制重新登录）

        Args:
            user_id: 用户 ID
            keep: 需要保留的会话 token（例如当前请求的会话）

        Returns:
            int: 删除的会话数量
        """
        with self.database.get_session() as session:
            records = session.exec(
                select(UserSession).where(UserSession.user_id == user_id)
            ).all()
            removed = 0
            for record in records:
                if keep is not None and record.token == keep:
                    continue
                session.delete(record)
                removed += 1
            session.commit()
            return removed

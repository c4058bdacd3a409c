"""用户管理（管理员功能）

账号状态流转、角色调整、密码重置与统计。
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlmodel import col, select

from expat_hub.models.db import Database
from expat_hub.models.user_account import UserAccount, UserRole, UserStatus, utcnow
from expat_hub.services.errors import ConflictError, NotFoundError, ValidationError
from expat_hub.services.password_hasher import hash_password
from expat_hub.services.session_store import SessionStore
from expat_hub.utils.logging_config import get_logger

logger = get_logger(__name__)

# action -> (允许的起始状态, 目标状态)；None 表示任意状态
STATUS_ACTIONS: Dict[str, Tuple[Optional[set], str]] = {
    "activate": (
        {UserStatus.PENDING.value, UserStatus.SUSPENDED.value, UserStatus.ACTIVE.value},
        UserStatus.ACTIVE.value,
    ),
    "suspend": (
        {UserStatus.ACTIVE.value, UserStatus.SUSPENDED.value},
        UserStatus.SUSPENDED.value,
    ),
    "ban": (None, UserStatus.BANNED.value),
}

ROLE_ACTIONS: Dict[str, str] = {
    "makeAdmin": UserRole.ADMIN.value,
    "makeModerator": UserRole.MODERATOR.value,
    "makeMember": UserRole.MEMBER.value,
}

USER_ACTIONS = tuple(STATUS_ACTIONS) + ("verify",) + tuple(ROLE_ACTIONS)


def escape_like(text: str) -> str:
    """LIKE 模式转义，% 和 _ 按字面匹配"""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UserAdminService:
    def __init__(self, database: Database, sessions: SessionStore):
        self.database = database
        self.sessions = sessions

    def list_users(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
    ) -> List[UserAccount]:
        statement = select(UserAccount)
        if search:
            pattern = f"%{escape_like(search.strip().lower())}%"
            statement = statement.where(
                or_(
                    col(UserAccount.email).like(pattern, escape="\\"),
                    func.lower(UserAccount.first_name).like(pattern, escape="\\"),
                    func.lower(UserAccount.last_name).like(pattern, escape="\\"),
                    func.lower(UserAccount.display_name).like(pattern, escape="\\"),
                )
            )
        if status:
            statement = statement.where(UserAccount.status == status)
        statement = statement.order_by(col(UserAccount.created_at).desc(), col(UserAccount.id).desc()).limit(limit)
        with self.database.get_session() as session:
            return list(session.exec(statement).all())

    def apply_action(self, user_id: int, action: str, actor_id: Optional[int] = None) -> UserAccount:
        """对用户执行管理动作

        Args:
            user_id: 目标用户 ID
            action: activate / suspend / ban / verify / makeAdmin / makeModerator / makeMember
            actor_id: 执行操作的管理员 ID（仅用于日志）

        Raises:
            ValidationError: 未知动作
            NotFoundError: 用户不存在
            ConflictError: 当前状态不允许该流转（banned 为终态）
        """
        if action not in USER_ACTIONS:
            raise ValidationError.for_field("action", "Invalid action")

        with self.database.get_session() as session:
            user = session.get(UserAccount, user_id)
            if not user:
                raise NotFoundError("User not found")

            if action in STATUS_ACTIONS:
                allowed_from, target = STATUS_ACTIONS[action]
                if allowed_from is not None and user.status not in allowed_from:
                    raise ConflictError(f"Cannot {action} a {user.status} account")
                user.status = target
            elif action == "verify":
                user.email_verified = True
                user.verification_code = None
            else:
                user.role = ROLE_ACTIONS[action]

            user.updated_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)

        logger.info(f"Admin action '{action}' on user {user_id} by {actor_id}: status={user.status} role={user.role}")
        return user

    def reset_password(self, user_id: int, new_password: str) -> UserAccount:
        """重置用户密码（管理员功能）

        重置后删除该用户的所有会话，强制重新登录。
        """
        if len(new_password or "") < 8:
            raise ValidationError.for_field("new_password", "Password must be at least 8 characters")
        with self.database.get_session() as session:
            user = session.get(UserAccount, user_id)
            if not user:
                raise NotFoundError("User not found")
            user.password_hash = hash_password(new_password)
            user.updated_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)

        self.sessions.delete_for_user(user_id)
        logger.info(f"Password reset for user {user_id}")
        return user

    def stats(self) -> Dict[str, Any]:
        week_ago = utcnow() - timedelta(days=7)
        with self.database.get_session() as session:
            by_status = dict(
                session.exec(
                    select(UserAccount.status, func.count()).group_by(UserAccount.status)
                ).all()
            )
            new_this_week = session.exec(
                select(func.count()).select_from(UserAccount).where(UserAccount.created_at >= week_ago)
            ).one()
            nationalities = session.exec(
                select(UserAccount.nationality, func.count().label("total"))
                .where(col(UserAccount.nationality).is_not(None))
                .group_by(UserAccount.nationality)
                .order_by(func.count().desc())
                .limit(10)
            ).all()

        return {
            "total_users": sum(by_status.values()),
            "active_users": by_status.get(UserStatus.ACTIVE.value, 0),
            "pending_users": by_status.get(UserStatus.PENDING.value, 0),
            "suspended_users": by_status.get(UserStatus.SUSPENDED.value, 0),
            "banned_users": by_status.get(UserStatus.BANNED.value, 0),
            "new_users_this_week": new_this_week,
            "users_by_nationality": [
                {"nationality": nationality, "count": total} for nationality, total in nationalities
            ],
        }

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """当前 UTC 时间（naive，与数据库中存储的格式一致）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserRole(str, Enum):
    """用户角色"""
    MEMBER = "member"
    MODERATOR = "moderator"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """账号状态

    状态流转：
    - pending -> active: 管理员激活或用户自助验证邮箱
    - active -> suspended: 管理员暂停
    - suspended -> active: 管理员重新激活
    - 任意状态 -> banned: 管理员封禁（终态）
    """
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class UserAccount(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)  # always lowercase
    password_hash: str

    first_name: str
    last_name: str
    display_name: Optional[str] = None

    # 个人资料
    nationality: Optional[str] = None
    current_location: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None
    years_in_oman: Optional[int] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    avatar: Optional[str] = None

    role: str = Field(default=UserRole.MEMBER.value, index=True)
    status: str = Field(default=UserStatus.PENDING.value, index=True)
    email_verified: bool = Field(default=False)
    verification_code: Optional[str] = None

    last_login_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class UserSession(SQLModel, table=True):
    """服务端会话

    token 即 cookie 中的值。过期的记录不会被主动清理，读取时按 expires_at 判断。
    """
    token: str = Field(primary_key=True)
    user_id: int = Field(foreign_key="useraccount.id", index=True)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)

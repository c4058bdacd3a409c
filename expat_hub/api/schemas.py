from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from expat_hub.models.user_account import UserAccount


class CamelModel(BaseModel):
    """JSON 字段使用 camelCase，同时允许按字段名赋值"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ========== Auth Schemas ==========

class RegisterRequest(CamelModel):
    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=8)
    nationality: Optional[str] = None
    current_location: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None
    years_in_oman: Optional[int] = Field(default=None, ge=0)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class VerifyEmailRequest(CamelModel):
    code: str = Field(min_length=6, max_length=6)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class UpdateProfileRequest(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=2)
    last_name: Optional[str] = Field(default=None, min_length=2)
    display_name: Optional[str] = None
    nationality: Optional[str] = None
    current_location: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None
    years_in_oman: Optional[int] = Field(default=None, ge=0)
    phone: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    avatar: Optional[str] = None


class UserView(CamelModel):
    """对外暴露的用户信息（不含密码哈希和验证码）"""
    id: int
    email: str
    first_name: str
    last_name: str
    display_name: Optional[str] = None
    nationality: Optional[str] = None
    current_location: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None
    years_in_oman: Optional[int] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    status: str
    email_verified: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_account(cls, user: UserAccount) -> "UserView":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            display_name=user.display_name,
            nationality=user.nationality,
            current_location=user.current_location,
            profession=user.profession,
            company=user.company,
            years_in_oman=user.years_in_oman,
            phone=user.phone,
            bio=user.bio,
            website=user.website,
            avatar=user.avatar,
            role=user.role,
            status=user.status,
            email_verified=user.email_verified,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
        )


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    user: UserView


class MeResponse(CamelModel):
    user: Optional[UserView] = None
    is_authenticated: bool


class SuccessResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None


# ========== Admin Schemas ==========

UserAction = Literal[
    "activate",
    "suspend",
    "ban",
    "verify",
    "makeAdmin",
    "makeModerator",
    "makeMember",
]


class UserActionRequest(CamelModel):
    user_id: int
    action: UserAction


class ResetPasswordRequest(CamelModel):
    new_password: str = Field(min_length=8)


class UserListResponse(CamelModel):
    users: List[UserView]
    total: int


class NationalityCount(CamelModel):
    nationality: str
    count: int


class AdminStatsResponse(CamelModel):
    total_users: int
    active_users: int
    pending_users: int
    suspended_users: int
    banned_users: int
    new_users_this_week: int
    users_by_nationality: List[NationalityCount]

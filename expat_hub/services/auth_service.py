from __future__ import annotations

import secrets
from typing import Any, Dict, List, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from expat_hub.models.db import Database
from expat_hub.models.user_account import (
    UserAccount,
    UserRole,
    UserSession,
    UserStatus,
    utcnow,
)
from expat_hub.services.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from expat_hub.services.notifier import LoggingVerificationSender, VerificationSender
from expat_hub.services.password_hasher import hash_password, verify_password
from expat_hub.services.session_store import SessionStore
from expat_hub.utils.logging_config import get_logger

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2

REGISTRATION_PROFILE_FIELDS = {
    "nationality",
    "current_location",
    "profession",
    "company",
    "years_in_oman",
}
EDITABLE_PROFILE_FIELDS = REGISTRATION_PROFILE_FIELDS | {
    "first_name",
    "last_name",
    "display_name",
    "phone",
    "bio",
    "website",
    "avatar",
}

# verified against when the email is unknown
_DUMMY_PASSWORD_HASH = hash_password(secrets.token_hex(16))

BLOCKED_STATUS_MESSAGES = {
    UserStatus.BANNED.value: "Your account has been banned. Please contact support.",
    UserStatus.SUSPENDED.value: "Your account has been suspended. Please contact support.",
}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_well_formed_code(code: str) -> bool:
    return len(code) == 6 and code.isascii() and code.isdigit()


def generate_verification_code() -> str:
    """6 位数字验证码"""
    return str(100000 + secrets.randbelow(900000))


def ensure_not_blocked(user: UserAccount) -> None:
    """banned / suspended 账号抛出 ForbiddenError"""
    message = BLOCKED_STATUS_MESSAGES.get(user.status)
    if message:
        raise ForbiddenError(message)


class AuthService:
    def __init__(
        self,
        database: Database,
        sessions: SessionStore,
        verification_sender: Optional[VerificationSender] = None,
    ):
        self.database = database
        self.sessions = sessions
        self.verification_sender = verification_sender or LoggingVerificationSender()

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        **profile: Any,
    ) -> Tuple[UserAccount, UserSession]:
        """注册新用户并创建会话

        Args:
            first_name: 名（至少 2 个字符）
            last_name: 姓（至少 2 个字符）
            email: 邮箱，存储前统一转为小写
            password: 密码（至少 8 个字符）
            **profile: 可选资料字段（nationality, current_location 等）

        Returns:
            (UserAccount, UserSession)

        Raises:
            ValidationError: 字段校验失败
            ConflictError: 邮箱已被注册
        """
        errors = self._check_registration(first_name, last_name, email, password, profile)
        if errors:
            raise ValidationError(details=errors)

        normalized = normalize_email(email)
        first_name = first_name.strip()
        last_name = last_name.strip()
        code = generate_verification_code()

        with self.database.get_session() as session:
            existing = session.exec(
                select(UserAccount).where(UserAccount.email == normalized)
            ).first()
            if existing:
                raise ConflictError()

            user = UserAccount(
                email=normalized,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                display_name=f"{first_name} {last_name}",
                verification_code=code,
                status=UserStatus.PENDING.value,
                role=UserRole.MEMBER.value,
                **profile,
            )
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                # concurrent registration with the same email
                session.rollback()
                raise ConflictError()
            session.refresh(user)

        logger.info(f"User registered: id={user.id} email={user.email}")
        self.verification_sender.send_verification_email(user, code)
        return user, self.sessions.create(user.id)

    def login(self, email: str, password: str) -> Tuple[UserAccount, UserSession]:
        normalized = normalize_email(email)
        with self.database.get_session() as session:
            user = session.exec(
                select(UserAccount).where(UserAccount.email == normalized)
            ).first()
            if not user:
                # same argon2 cost as a real mismatch
                verify_password(_DUMMY_PASSWORD_HASH, password)
            if not user or not verify_password(user.password_hash, password):
                logger.warning(f"Failed login attempt for {normalized}")
                raise AuthError()

            ensure_not_blocked(user)

            user.last_login_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)

        logger.info(f"User logged in: id={user.id}")
        return user, self.sessions.create(user.id)

    def resolve(self, token: Optional[str]) -> Optional[UserAccount]:
        """根据会话 token 获取当前用户

        每次都读取最新的用户记录，管理员的角色/状态变更在下一次请求即生效。
        token 缺失、过期或无效时返回 None，不抛异常。
        """
        record = self.sessions.lookup(token)
        if record is None:
            return None
        with self.database.get_session() as session:
            return session.get(UserAccount, record.user_id)

    def logout(self, token: Optional[str]) -> None:
        self.sessions.delete(token)

    def get_user(self, user_id: int) -> UserAccount:
        with self.database.get_session() as session:
            user = session.get(UserAccount, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def verify_email(self, user_id: int, code: str) -> UserAccount:
        """用户自助验证邮箱

        验证成功后 email_verified=True，pending 状态的账号转为 active。
        """
        with self.database.get_session() as session:
            user = session.get(UserAccount, user_id)
            if not user:
                raise NotFoundError("User not found")
            expected = user.verification_code
            submitted = str(code or "").strip()
            if (
                not expected
                or not is_well_formed_code(submitted)
                or not secrets.compare_digest(expected.encode(), submitted.encode())
            ):
                raise ValidationError.for_field("code", "Invalid verification code")

            user.email_verified = True
            user.verification_code = None
            if user.status == UserStatus.PENDING.value:
                user.status = UserStatus.ACTIVE.value
            user.updated_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)

        logger.info(f"Email verified: id={user.id}")
        return user

    def update_profile(self, user_id: int, **fields: Any) -> UserAccount:
        unknown = set(fields) - EDITABLE_PROFILE_FIELDS
        if unknown:
            raise ValidationError(
                details=[{"field": name, "message": "Field cannot be updated"} for name in sorted(unknown)]
            )
        errors = []
        for name in ("first_name", "last_name"):
            if name in fields and len((fields[name] or "").strip()) < MIN_NAME_LENGTH:
                errors.append({"field": name, "message": f"Must be at least {MIN_NAME_LENGTH} characters"})
        if errors:
            raise ValidationError(details=errors)

        with self.database.get_session() as session:
            user = session.get(UserAccount, user_id)
            if not user:
                raise NotFoundError("User not found")
            for name, value in fields.items():
                if isinstance(value, str):
                    value = value.strip()
                setattr(user, name, value)
            user.updated_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    def change_password(
        self,
        user_id: int,
        current_password: str,
        new_password: str,
        keep_token: Optional[str] = None,
    ) -> UserAccount:
        """修改密码，并使该用户的其它会话失效"""
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError.for_field(
                "new_password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        with self.database.get_session() as session:
            user = session.get(UserAccount, user_id)
            if not user:
                raise NotFoundError("User not found")
            if not verify_password(user.password_hash, current_password):
                raise ValidationError.for_field("current_password", "Current password is incorrect")
            user.password_hash = hash_password(new_password)
            user.updated_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)

        revoked = self.sessions.delete_for_user(user_id, keep=keep_token)
        logger.info(f"Password changed: id={user_id}, revoked {revoked} other session(s)")
        return user

    def ensure_default_admin(self, email: str, password: str) -> None:
        """确保存在默认管理员账号

        如果数据库中没有任何管理员账号，则创建一个已激活、已验证的管理员。
        """
        normalized = normalize_email(email)
        with self.database.get_session() as session:
            admin_exists = session.exec(
                select(UserAccount).where(UserAccount.role == UserRole.ADMIN.value)
            ).first()
            if admin_exists:
                return

            existing = session.exec(
                select(UserAccount).where(UserAccount.email == normalized)
            ).first()
            if existing:
                # 已有同邮箱账号，提升为管理员
                existing.role = UserRole.ADMIN.value
                existing.status = UserStatus.ACTIVE.value
                existing.email_verified = True
                existing.updated_at = utcnow()
                session.add(existing)
            else:
                session.add(
                    UserAccount(
                        email=normalized,
                        password_hash=hash_password(password),
                        first_name="Admin",
                        last_name="User",
                        display_name="Administrator",
                        role=UserRole.ADMIN.value,
                        status=UserStatus.ACTIVE.value,
                        email_verified=True,
                    )
                )
            session.commit()
        logger.info(f"Default admin user ensured: {normalized}")

    @staticmethod
    def _check_registration(
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        profile: Dict[str, Any],
    ) -> List[Dict[str, str]]:
        errors = []
        if len((first_name or "").strip()) < MIN_NAME_LENGTH:
            errors.append({"field": "first_name", "message": "First name must be at least 2 characters"})
        if len((last_name or "").strip()) < MIN_NAME_LENGTH:
            errors.append({"field": "last_name", "message": "Last name must be at least 2 characters"})
        try:
            validate_email(normalize_email(email), check_deliverability=False)
        except EmailNotValidError:
            errors.append({"field": "email", "message": "Invalid email address"})
        if len(password or "") < MIN_PASSWORD_LENGTH:
            errors.append({"field": "password", "message": "Password must be at least 8 characters"})
        for name in sorted(set(profile) - REGISTRATION_PROFILE_FIELDS):
            errors.append({"field": name, "message": "Unknown field"})
        return errors

"""验证码发送

邮件投递属于外部系统，这里只定义接口；默认实现把验证码写入日志。
"""
from typing import Protocol

from expat_hub.models.user_account import UserAccount
from expat_hub.utils.logging_config import get_logger

logger = get_logger(__name__)


class VerificationSender(Protocol):
    def send_verification_email(self, user: UserAccount, code: str) -> None:
        ...


class LoggingVerificationSender:
    """Writes the verification code to the application log."""

    def send_verification_email(self, user: UserAccount, code: str) -> None:
        logger.info(f"Verification code for {user.email}: {code}")

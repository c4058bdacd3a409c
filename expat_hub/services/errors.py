"""业务异常

服务层只抛出这里定义的异常，由 main.py 中注册的 exception handler 统一转换为 HTTP 响应。
"""
from typing import Dict, List, Optional


class AppError(Exception):
    """Base exception for the application."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, str]]] = None):
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Malformed input. Carries field-level details."""

    status_code = 400
    default_message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(details=[{"field": field, "message": message}])


class AuthError(AppError):
    status_code = 401
    default_message = "Invalid email or password"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "An account with this email already exists"


class InternalError(AppError):
    status_code = 500
    default_message = "An unexpected error occurred"

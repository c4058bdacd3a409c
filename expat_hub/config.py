"""运行时配置

所有配置项从环境变量读取，统一以 EXPAT_HUB_ 为前缀。
"""
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_DB_PATH = PROJECT_ROOT / "database.db"
DEFAULT_LOG_DIR = PROJECT_ROOT / "logs"

DEV_ADMIN_EMAIL = "admin@expathub.com"
DEV_ADMIN_PASSWORD = "ChangeMe@2024"


def _get_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: Optional[str], default: List[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    env: str = "development"
    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"

    session_cookie_name: str = "session"
    session_days: int = 30
    cookie_secure: bool = False

    log_level: str = "INFO"
    log_dir: Path = DEFAULT_LOG_DIR
    log_to_file: bool = True

    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

    admin_email: Optional[str] = DEV_ADMIN_EMAIL
    admin_password: Optional[str] = DEV_ADMIN_PASSWORD

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def session_lifetime(self) -> timedelta:
        return timedelta(days=self.session_days)

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.getenv("EXPAT_HUB_ENV", "development")
        db_path = Path(os.getenv("EXPAT_HUB_DB_PATH", DEFAULT_DB_PATH))
        return cls(
            env=env,
            database_url=os.getenv("EXPAT_HUB_DATABASE_URL", f"sqlite:///{db_path}"),
            session_cookie_name=os.getenv("EXPAT_HUB_SESSION_COOKIE", "session"),
            session_days=int(os.getenv("EXPAT_HUB_SESSION_DAYS", "30")),
            cookie_secure=_get_bool(
                os.getenv("EXPAT_HUB_COOKIE_SECURE"),
                default=env.lower() == "production",
            ),
            log_level=os.getenv("EXPAT_HUB_LOG_LEVEL", "INFO"),
            log_dir=Path(os.getenv("EXPAT_HUB_LOG_DIR", DEFAULT_LOG_DIR)),
            log_to_file=_get_bool(os.getenv("EXPAT_HUB_LOG_TO_FILE"), default=True),
            cors_origins=_get_list(
                os.getenv("EXPAT_HUB_CORS_ORIGINS"), ["http://localhost:3000"]
            ),
            admin_email=os.getenv("EXPAT_HUB_ADMIN_EMAIL", DEV_ADMIN_EMAIL),
            admin_password=os.getenv("EXPAT_HUB_ADMIN_PASSWORD", DEV_ADMIN_PASSWORD),
        )

    def validate_runtime_config(self) -> None:
        if self.is_production and self.admin_password == DEV_ADMIN_PASSWORD:
            raise RuntimeError("EXPAT_HUB_ADMIN_PASSWORD must be set in production.")
        if self.session_days <= 0:
            raise RuntimeError("EXPAT_HUB_SESSION_DAYS must be positive.")

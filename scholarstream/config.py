import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

DEV_JWT_SECRET = "scholarstream-dev-secret"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./scholarstream.db"
    jwt_secret: str = DEV_JWT_SECRET
    jwt_expires_minutes: int = 60
    stripe_secret_key: str = ""
    stripe_currency: str = "usd"
    site_domain: str = "http://localhost:5173"
    admin_email: Optional[str] = None
    super_admin_email: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(dotenv_path=ENV_PATH)

        settings = cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=os.getenv("JWT_SECRET", DEV_JWT_SECRET),
            jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", "60")),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
            stripe_currency=os.getenv("STRIPE_CURRENCY", "usd"),
            site_domain=os.getenv("SITE_DOMAIN", cls.site_domain).rstrip("/"),
            admin_email=os.getenv("ADMIN_EMAIL") or None,
            super_admin_email=os.getenv("SUPER_ADMIN_EMAIL") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
        if settings.jwt_secret == DEV_JWT_SECRET:
            logger.warning("JWT_SECRET is not set, using the development secret")
        return settings

    @property
    def bootstrap_emails(self) -> set:
        return {e.lower() for e in (self.admin_email, self.super_admin_email) if e}

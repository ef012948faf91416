# src/config/settings.py
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Configuración inmutable de la app, cargada una sola vez del entorno."""

    mongo_uri: str = "mongodb://localhost:27017"
    mongo_database: str = "learnhub"
    redis_uri: str = "redis://localhost:6379/0"

    session_ttl_seconds: int = 3600
    otp_ttl_seconds: int = 300
    reset_token_ttl_seconds: int = 900

    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    currency: str = "inr"
    frontend_url: str = "http://localhost:3000"

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    mail_from: Optional[str] = None

    cloudinary_url: str = ""

    log_level: str = "INFO"
    port: int = 8000


def load_settings() -> Settings:
    load_dotenv()
    defaults = Settings()
    return Settings(
        mongo_uri=os.getenv("MONGO_URI", defaults.mongo_uri),
        mongo_database=os.getenv("MONGO_DATABASE", defaults.mongo_database),
        redis_uri=os.getenv("REDIS_URI", defaults.redis_uri),
        session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", defaults.session_ttl_seconds)),
        otp_ttl_seconds=int(os.getenv("OTP_TTL_SECONDS", defaults.otp_ttl_seconds)),
        reset_token_ttl_seconds=int(os.getenv("RESET_TOKEN_TTL_SECONDS", defaults.reset_token_ttl_seconds)),
        stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", defaults.stripe_secret_key),
        stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", defaults.stripe_webhook_secret),
        currency=os.getenv("PAYMENT_CURRENCY", defaults.currency).lower(),
        frontend_url=os.getenv("FRONTEND_URL", defaults.frontend_url).rstrip("/"),
        smtp_host=os.getenv("SMTP_HOST", defaults.smtp_host),
        smtp_port=int(os.getenv("SMTP_PORT", defaults.smtp_port)),
        smtp_user=os.getenv("SMTP_USER", defaults.smtp_user),
        smtp_password=os.getenv("SMTP_PASSWORD", defaults.smtp_password),
        mail_from=os.getenv("MAIL_FROM") or os.getenv("SMTP_USER") or None,
        cloudinary_url=os.getenv("CLOUDINARY_URL", defaults.cloudinary_url),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        port=int(os.getenv("PORT", defaults.port)),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()

# src/api/dependencies.py
"""
Dependencias de FastAPI.

Los servicios se arman por request a partir de la base, Redis y la config
inyectadas, así los tests pueden reemplazar cualquier pieza con
`app.dependency_overrides`.
"""
from typing import Any, Callable, Dict, Optional

import redis
from fastapi import Depends, Header
from pymongo.database import Database

from src.config.database import get_mongo_db, get_redis_client
from src.config.settings import Settings, get_settings
from src.models.base import Role
from src.repositories.session_repository import SessionRepository
from src.services.auth_service import AuthService
from src.services.cart_service import CartService
from src.services.course_service import CourseService
from src.services.enrollment_service import EnrollmentService
from src.services.media_service import MediaService
from src.services.notification_service import NotificationService
from src.services.payment_gateway import PaymentGateway
from src.services.progress_service import ProgressService
from src.services.rating_service import RatingService
from src.utils.errors import ForbiddenError


# ==================== INFRA ====================

def get_app_settings() -> Settings:
    return get_settings()


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return get_mongo_db(settings)


def get_redis(settings: Settings = Depends(get_app_settings)) -> redis.Redis:
    return get_redis_client(settings)


def get_notifier(settings: Settings = Depends(get_app_settings)) -> NotificationService:
    return NotificationService(settings)


def get_payment_gateway(settings: Settings = Depends(get_app_settings)) -> PaymentGateway:
    return PaymentGateway(settings)


def get_media_service(settings: Settings = Depends(get_app_settings)) -> MediaService:
    return MediaService(settings)


# ==================== SERVICIOS ====================

def get_auth_service(
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_db),
    client: redis.Redis = Depends(get_redis),
    notifier: NotificationService = Depends(get_notifier),
) -> AuthService:
    return AuthService(settings, SessionRepository(client), notifier, db)


def get_course_service(db: Database = Depends(get_db)) -> CourseService:
    return CourseService(db)


def get_progress_service(db: Database = Depends(get_db)) -> ProgressService:
    return ProgressService(db)


def get_cart_service(db: Database = Depends(get_db)) -> CartService:
    return CartService(db)


def get_rating_service(db: Database = Depends(get_db)) -> RatingService:
    return RatingService(db)


def get_enrollment_service(
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notifier),
) -> EnrollmentService:
    return EnrollmentService(settings, gateway, notifier, db)


# ==================== AUTH ====================

def get_session_token(
    authorization: Optional[str] = Header(None),
    x_session_id: Optional[str] = Header(None),
) -> Optional[str]:
    """Token de `Authorization: Bearer <token>` o, si no viene, de `X-Session-Id`."""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return x_session_id


def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return auth.resolve_session(token)


def require_role(*roles: Role) -> Callable[..., Dict[str, Any]]:
    """Guard componible: `user = Depends(require_role(Role.STUDENT))`."""
    allowed = {Role(r).value for r in roles}

    def _guard(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if user.get("role") not in allowed:
            raise ForbiddenError(f"Access denied. {' or '.join(sorted(allowed))} privileges required.")
        return user

    return _guard

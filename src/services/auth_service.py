# src/services/auth_service.py
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from src.config.settings import Settings
from src.models.user_model import UserOut
from src.repositories.mongo_repository import MongoRepository
from src.repositories.session_repository import SessionRepository
from src.repositories.user_repository import UserRepository
from src.services.notification_service import NotificationService, otp_email, reset_password_email
from src.utils.errors import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from src.utils.security import (
    hash_password,
    hash_token,
    new_otp,
    new_reset_token,
    new_session_token,
    verify_password,
)

DEFAULT_PROFILE_IMAGE = (
    "https://img.freepik.com/premium-vector/"
    "man-professional-business-casual-young-avatar-icon-illustration_1277826-623.jpg"
)


class AuthService:
    def __init__(
        self,
        settings: Settings,
        sessions: SessionRepository,
        notifier: NotificationService,
        db: Optional[Database] = None,
    ):
        self.settings = settings
        self.sessions = sessions
        self.notifier = notifier
        self.users = UserRepository(db)

    @staticmethod
    def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
        return UserOut(**MongoRepository.clean(doc)).model_dump(mode="json")

    def _send_otp(self, email: str) -> None:
        otp = new_otp()
        self.sessions.set_otp(email, otp, self.settings.otp_ttl_seconds)
        # email de OTP es camino crítico: si falla, falla el registro
        if not self.notifier.send_templated_email(email, "Verify your email", otp_email(otp)):
            self.sessions.delete_otp(email)
            raise ExternalServiceError("Failed to send OTP email. Please try again.")

    # ===============================================================
    # 👤 Registro + OTP
    # ===============================================================
    def register(self, payload: Dict[str, Any]) -> str:
        email = payload["email"].strip().lower()
        logging.info(f"🟦 Intentando registrar usuario: {email}")

        existing = self.users.find_by_email(email)
        if existing:
            if existing.get("otpVerified"):
                logging.warning("⚠️ Usuario ya existe en MongoDB.")
                raise ConflictError("User already exists, please log in")
            # registrado pero sin verificar: reenviamos OTP
            self._send_otp(email)
            return "OTP sent to your email. Please verify your email to proceed."

        if self.users.find_by_mobile(payload["mobileNumber"]):
            raise ConflictError("Mobile number already registered")

        self._send_otp(email)
        try:
            created = self.users.create({
                "firstName": payload["firstName"],
                "lastName": payload["lastName"],
                "email": email,
                "password": hash_password(payload["password"]),
                "mobileNumber": payload["mobileNumber"],
                "gender": payload.get("gender") or "Male",
                "role": payload.get("role") or "Student",
                "otpVerified": False,
                "profileImage": DEFAULT_PROFILE_IMAGE,
                "createdCourses": [],
                "enrolledCourses": [],
            })
        except DuplicateKeyError:
            raise ConflictError("User already exists, please log in")
        logging.info(f"✅ Usuario creado con _id={created['_id']}")
        return "User registered successfully. OTP sent to email."

    def verify_otp(self, email: str, otp: str) -> None:
        email = email.strip().lower()
        user = self.users.find_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        stored = self.sessions.get_otp(email)
        if not stored or stored != otp:
            raise ValidationError("Invalid or expired OTP")
        self.users.update(user["_id"], {"otpVerified": True})
        self.sessions.delete_otp(email)

    # ===============================================================
    # 🔑 Sesión
    # ===============================================================
    def login(self, email: str, password: str) -> Dict[str, Any]:
        user = self.users.find_by_email(email)
        if not user or not verify_password(password, user.get("password", "")):
            raise AuthenticationError("Invalid email or password")
        if not user.get("otpVerified"):
            raise AuthenticationError("User is not verified. Please complete OTP verification.")

        token = new_session_token()
        self.sessions.create_session(token, user["_id"], self.settings.session_ttl_seconds)
        return {
            "token": token,
            "auth_header": f"Bearer {token}",
            "expires_in": self.settings.session_ttl_seconds,
            "user": {
                "firstName": user["firstName"],
                "lastName": user["lastName"],
                "email": user["email"],
                "role": user["role"],
            },
        }

    def logout(self, token: str) -> None:
        self.sessions.delete_session(token)

    def resolve_session(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise AuthenticationError("Authorization token is required")
        user_id = self.sessions.get_session_user(token)
        if not user_id:
            raise AuthenticationError("Invalid or expired token")
        user = self.users.find_public(user_id)
        if not user:
            raise AuthenticationError("Invalid or expired token")
        return user

    # ===============================================================
    # 🔁 Reset de password
    # ===============================================================
    def forgot_password(self, email: str) -> None:
        user = self.users.find_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        token = new_reset_token()
        self.sessions.set_reset_token(hash_token(token), user["_id"], self.settings.reset_token_ttl_seconds)
        reset_url = f"{self.settings.frontend_url}/reset-password/?reset-token={token}"
        if not self.notifier.send_templated_email(user["email"], "Reset your password", reset_password_email(reset_url)):
            raise ExternalServiceError("Failed to send reset email. Please try again.")

    def reset_password(self, token: str, new_password: str) -> None:
        user_id = self.sessions.pop_reset_token(hash_token(token))
        if not user_id or not self.users.find_one(user_id, {"_id": 1}):
            raise ValidationError("Invalid or expired reset token.")
        self.users.update(user_id, {"password": hash_password(new_password)})

    # ===============================================================
    # 🧍 Perfil
    # ===============================================================
    def get_profile(self, user_id: str) -> Dict[str, Any]:
        user = self.users.find_public(user_id)
        if not user:
            raise NotFoundError("User not found")
        return self.public_user(user)

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        changes = {k: v for k, v in updates.items() if v is not None}
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])
        if not changes:
            return self.get_profile(user_id)

        changes["updatedAt"] = datetime.utcnow()
        try:
            updated = self.users.update_raw(user_id, {"$set": changes})
        except DuplicateKeyError:
            raise ConflictError("Mobile number already registered")
        if not updated:
            raise NotFoundError("User not found")
        updated.pop("password", None)
        return self.public_user(updated)

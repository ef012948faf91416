# src/repositories/session_repository.py
from typing import Optional

import redis

from src.config.database import get_redis_client


class SessionRepository:
    """
    Repositorio Redis para datos efímeros de autenticación.
    Sesiones, OTPs de registro y tokens de reset viven con TTL y expiran solos.
    """

    def __init__(self, client: Optional[redis.Redis] = None):
        # 🔗 Si no se inyecta un cliente, usamos la conexión global
        self.client = client if client is not None else get_redis_client()

    # ===============================================================
    # 🔑 Sesiones
    # ===============================================================
    def create_session(self, token: str, user_id: str, ttl_seconds: int) -> None:
        self.client.setex(f"session:{token}", ttl_seconds, user_id)

    def get_session_user(self, token: str) -> Optional[str]:
        user_id = self.client.get(f"session:{token}")
        if isinstance(user_id, bytes):
            user_id = user_id.decode("utf-8")
        return user_id

    def delete_session(self, token: str) -> None:
        self.client.delete(f"session:{token}")

    # ===============================================================
    # ✉️ OTP de registro
    # ===============================================================
    def set_otp(self, email: str, otp: str, ttl_seconds: int) -> None:
        self.client.setex(f"otp:{email}", ttl_seconds, otp)

    def get_otp(self, email: str) -> Optional[str]:
        otp = self.client.get(f"otp:{email}")
        return otp.decode("utf-8") if isinstance(otp, bytes) else otp

    def delete_otp(self, email: str) -> None:
        self.client.delete(f"otp:{email}")

    # ===============================================================
    # 🔁 Reset de password (se guarda el hash del token, nunca el token)
    # ===============================================================
    def set_reset_token(self, token_hash: str, user_id: str, ttl_seconds: int) -> None:
        self.client.setex(f"reset:{token_hash}", ttl_seconds, user_id)

    def pop_reset_token(self, token_hash: str) -> Optional[str]:
        key = f"reset:{token_hash}"
        pipe = self.client.pipeline()
        pipe.get(key)
        pipe.delete(key)
        user_id, _ = pipe.execute()
        return user_id.decode("utf-8") if isinstance(user_id, bytes) else user_id

import hashlib
import secrets

from passlib.context import CryptContext

# Usamos pbkdf2_sha256 para evitar dependencias binarias (bcrypt) en la imagen.
# pbkdf2_sha256 es compatible, seguro y no tiene la limitación de 72 bytes.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # hash vacío o con formato desconocido
        return False


def new_session_token() -> str:
    return secrets.token_hex(32)


def new_otp() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


def new_reset_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

import base64
import secrets
from datetime import datetime, timedelta, timezone

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import JWTError, jwt

from ..config import settings

pwd = Argon2Hasher()


class PasswordHasher:
    def hash(self, plain: str) -> str: return pwd.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return pwd.verify(hashed, plain)
        except (VerificationError, InvalidHashError):
            return False


def create_access_token(sub: str, minutes: int | None = None) -> str:
    minutes = minutes if minutes is not None else settings.JWT_TTL_MINUTES
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": sub, "exp": exp}
    return jwt.encode(payload, settings.app.jwt, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> str:
    """Returns the user id (sub) stored in the token or raises JWTError."""
    payload = jwt.decode(token, settings.app.jwt, algorithms=[settings.JWT_ALGORITHM])
    sub = payload.get("sub")
    if not sub:
        raise JWTError("No subject")
    return sub


def generate_progress_token() -> str:
    # 32 random bytes, url-safe base64 with padding (44 chars)
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).decode("ascii")

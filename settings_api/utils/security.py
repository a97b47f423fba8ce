import hmac
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Header, Request
from jose import jwt, JWTError
from passlib.context import CryptContext

from settings_api.config import settings
from settings_api.utils.errors import AuthError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Verification accepts any HMAC signature; RSA, EC and "none" are rejected
ACCEPTED_ALGORITHMS = ["HS256", "HS384", "HS512"]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

@lru_cache(maxsize=4)
def _hash_configured_password(password: str) -> str:
    return hash_password(password)

def authenticate(username: str, password: str) -> bool:
    """Checks the single configured admin credential pair."""
    hashed = settings.ADMIN_PASSWORD_HASH or _hash_configured_password(settings.ADMIN_PASSWORD)
    username_ok = hmac.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
    return verify_password(password, hashed) and username_ok


def create_access_token(username: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))
    claims = {"username": username, "exp": int(expire.timestamp())}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str):
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=ACCEPTED_ALGORITHMS)
    except JWTError:
        return None


async def get_current_username(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> str:
    """
    Gate for protected routes. The Authorization header carries the raw token;
    a leading "Bearer " is tolerated. The username claim is returned and kept on
    request.state for the rest of the request.
    """
    token = (authorization or "").strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    if not token:
        raise AuthError("missing token")

    payload = decode_access_token(token)
    if payload is None:
        raise AuthError("invalid token")

    username = payload.get("username")
    if not isinstance(username, str):
        raise AuthError("invalid token (no username)")

    request.state.username = username
    return username

"""Security utilities: password hashing and JWT token handling."""
import uuid
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from vidtube.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(subject: str | UUID, **claims) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        **claims,
        "sub": str(subject),
        "exp": expire,
        "type": ACCESS_TOKEN_TYPE,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.ACCESS_TOKEN_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(subject: str | UUID) -> str:
    # jti keeps two tokens issued within the same second distinct
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "type": REFRESH_TOKEN_TYPE,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.REFRESH_TOKEN_SECRET, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str, expected_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != expected_type or not payload.get("sub"):
        return None
    return payload


def decode_access_token(token: str) -> dict | None:
    return _decode(token, settings.ACCESS_TOKEN_SECRET, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict | None:
    return _decode(token, settings.REFRESH_TOKEN_SECRET, REFRESH_TOKEN_TYPE)


def parse_subject(payload: dict) -> UUID | None:
    try:
        return UUID(payload["sub"])
    except (KeyError, ValueError):
        return None

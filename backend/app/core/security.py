"""
Security utilities for authentication and password hashing.

The credential verifier lives here: it turns a bearer token into
:class:`Claims` and never touches the database.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from .config import settings
from .exceptions import InvalidToken

# Password hashing
# Use pbkdf2_sha256 as a stable default to avoid environment bcrypt issues.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

# Role claims written into issued tokens
ROLE_ORGANIZATION = "organization"
ROLE_TEAM_MEMBER = "team_member"
ROLE_SUPERADMIN = "superadmin"


@dataclass(frozen=True)
class Claims:
    """Verified token payload. ``role`` is advisory until resolved."""
    subject_id: str
    role: Optional[str] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_otp(length: Optional[int] = None) -> str:
    """Numeric one-time code for email verification."""
    length = length or settings.OTP_LENGTH
    return "".join(secrets.choice("0123456789") for _ in range(length))


def generate_invite_token() -> str:
    return secrets.token_hex(20)


def create_access_token(
    subject: str,
    role: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """Create a JWT access token."""
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "exp": expire,
        "iat": now,
        "sub": str(subject),
        "id": str(subject),
    }
    if role:
        to_encode["role"] = role

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def extract_bearer(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise InvalidToken("Unauthorized, token required")
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise InvalidToken("Unauthorized, token required")
    return token.strip()


def verify(token: Optional[str]) -> Claims:
    """Validate a signed token and return its claims.

    Raises :class:`InvalidToken` when the token is missing, malformed,
    expired, badly signed or carries no subject.
    """
    if not token:
        raise InvalidToken("Unauthorized, token required")
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require_exp": True},
        )
    except ExpiredSignatureError:
        raise InvalidToken("Token expired")
    except JWTError:
        raise InvalidToken("Invalid token")

    subject_id = payload.get("id") or payload.get("sub")
    if not subject_id or not isinstance(subject_id, str):
        raise InvalidToken("Invalid token")

    role = payload.get("role")
    if role is not None and not isinstance(role, str):
        raise InvalidToken("Invalid token")

    return Claims(subject_id=subject_id, role=role)

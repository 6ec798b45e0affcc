from datetime import datetime, timedelta, timezone
from typing import Literal

from jose import jwt

from tripdesk.core.config import settings

Role = Literal["SuperAdmin", "Admin", "Agent"]
ADMIN_ROLES: tuple[Role, ...] = ("SuperAdmin", "Admin")


# ─── JWT ──────────────────────────────────────────────────────────────────────
# Sessions are issued by the hosted auth service. We only verify the signature
# and audience; the service never mints tokens in production.

def decode_token(token: str) -> dict:
    """Raises JWTError on invalid/expired token or wrong audience."""
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )


def create_access_token(subject: str, email: str, expires_minutes: int = 60) -> str:
    """Mint a token shaped like the auth service's (local dev and tests)."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode(
        {
            "sub": subject,
            "email": email,
            "aud": settings.JWT_AUDIENCE,
            "role": "authenticated",
            "exp": expire,
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

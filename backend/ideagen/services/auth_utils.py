"""Authentication utilities — bearer token creation and verification.

Rules
-----
- NO hardcoded secrets in production — secret and algorithm come from Settings
- Tokens carry identity only; nothing else about the user is stored server-side
- Verification never raises: an unusable token is simply "no user"
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_EXPIRE_MINUTES = 1440  # 24h


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    email_verified: bool = False

    def to_wire(self) -> Dict[str, Any]:
        data = asdict(self)
        data["emailVerified"] = data.pop("email_verified")
        return data


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------
def create_access_token(
    uid: str,
    email: str = "",
    name: str = "",
    picture: str = "",
    email_verified: bool = False,
    expires_minutes: int = DEFAULT_EXPIRE_MINUTES,
    settings: Optional[Settings] = None,
) -> str:
    """Create a signed JWT for `uid`. Used by tests and local tooling."""
    settings = settings or get_settings()
    payload = {
        "sub": uid,
        "email": email,
        "name": name,
        "picture": picture,
        "email_verified": email_verified,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> Optional[dict]:
    """Decode and validate a JWT. Returns payload dict or None."""
    settings = settings or get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.info("[AUTH] Token rejected: %s", exc)
        return None


def verify_token(token: str, settings: Optional[Settings] = None) -> Optional[AuthUser]:
    """Map a valid token's claims to an AuthUser, or None."""
    payload = decode_access_token(token, settings)
    if payload is None:
        return None

    uid = payload.get("user_id") or payload.get("sub")
    if not uid:
        logger.info("[AUTH] Token has no subject claim")
        return None

    return AuthUser(
        uid=str(uid),
        email=payload.get("email") or None,
        name=payload.get("name") or None,
        picture=payload.get("picture") or None,
        email_verified=bool(payload.get("email_verified", False)),
    )

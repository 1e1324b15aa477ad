"""Bearer token validation for TaskMind.

Users sign in through the external auth service, which issues JWTs whose
``sub`` claim is the user ID. TaskMind checks the signature, expiry and
(optionally) issuer, then reads ``sub``. ``create_access_token`` mints tokens
for local development and tests.
"""

import logging
import os
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "720"))
# When set, tokens must carry a matching ``iss`` claim.
JWT_ISSUER = os.getenv("JWT_ISSUER") or None

REQUIRED_CLAIMS = ["sub", "exp"]


def create_access_token(user_id: str, expires_in: Optional[timedelta] = None) -> str:
    """Sign a token for ``user_id`` valid for ``expires_in`` (JWT_EXPIRATION_HOURS by default)."""
    issued_at = datetime.utcnow()
    payload: Dict[str, Any] = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + (expires_in or timedelta(hours=JWT_EXPIRATION_HOURS)),
    }
    if JWT_ISSUER:
        payload["iss"] = JWT_ISSUER
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Validate ``token`` and return its claims, or None if it cannot be used."""
    try:
        return jwt.decode(
            token,
            JWT_SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            issuer=JWT_ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected token: {type(e).__name__}")
    return None


def get_user_id_from_token(token: str) -> Optional[str]:
    claims = decode_access_token(token)
    return claims.get("sub") if claims else None

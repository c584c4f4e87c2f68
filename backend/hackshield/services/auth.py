"""Auth Service — password hashing and bearer token issue/verification.

Invariants:
    - Passwords hashed with werkzeug (salted pbkdf2/scrypt); plaintext never stored or logged
    - Tokens are HS256 JWTs carrying sub (user id) and role, with exp
    - Any decode failure (bad signature, expiry, malformed) → AuthenticationError

Design Decisions:
    - Stateless JWTs: no session table; role in the token is advisory, the user row
      is always reloaded by get_current_user
"""

import logging
from datetime import timedelta
from uuid import UUID

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from hackshield.config import get_settings
from hackshield.core.errors import AuthenticationError
from hackshield.core.time_utils import utc_now

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(user_id: UUID, role: str) -> str:
    settings = get_settings()
    now = utc_now()
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError("Invalid token")
    if "sub" not in payload:
        raise AuthenticationError("Invalid token")
    return payload

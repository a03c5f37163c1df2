"""
Password hashing and JWT helpers.

Hashing uses bcrypt with a configurable cost factor. Tokens are HS256 JWTs
carrying exactly the user's id and email plus an expiry. The signing secret
is always passed in by the caller.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from producttracker.exceptions import InvalidTokenError


ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60
BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


# =============================================================================
# Passwords
# =============================================================================

def get_password_hash(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plaintext password with a fresh random salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Malformed stored hash or over-long password
        return False


# =============================================================================
# Tokens
# =============================================================================

def create_access_token(
    data: Dict[str, Any],
    secret_key: str,
    expires_delta: Optional[timedelta] = None,
    algorithm: str = ALGORITHM,
) -> str:
    """
    Sign a JWT for the given claims.

    Args:
        data: Claims to embed (``id`` and ``email`` for user tokens).
        secret_key: Signing secret.
        expires_delta: Lifetime of the token. Defaults to
            ``ACCESS_TOKEN_EXPIRE_MINUTES``.
        algorithm: JWS algorithm.

    Returns:
        Encoded token string.
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(
    token: str,
    secret_key: str,
    algorithm: str = ALGORITHM,
) -> Dict[str, Any]:
    """
    Verify a token's signature and expiry and return its claims.

    Raises:
        InvalidTokenError: If verification fails or the user claims are missing.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError as e:
        raise InvalidTokenError(detail=str(e)) from e

    if payload.get("id") is None or payload.get("email") is None:
        raise InvalidTokenError(detail="Token payload is missing user claims")

    return payload

"""Security utilities.

Provides:
- Password hashing with Argon2id for sign-up (OWASP recommended)
- JWT access token creation and validation
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from argon2 import PasswordHasher
from jose import JWTError, jwt

from commentable.config.settings import get_settings


# https://cheatsheetseries.owasp.org/cheatsheets/Password_Storage_Cheat_Sheet.html
_password_hasher = PasswordHasher(
    time_cost=2,
    memory_cost=19456,  # 19 MiB
    parallelism=1,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    Example:
        >>> hash_password("my-secure-password").startswith("$argon2id$")
        True
    """
    return _password_hasher.hash(password)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        data: Claims, typically ``{"sub": user_id, "role": role}``.
        expires_delta: Token lifetime (default from settings).
    """
    settings = get_settings()

    now = datetime.now(UTC)
    to_encode = {
        **data,
        "exp": now
        + (expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)),
        "iat": now,
        "type": "access",
    }
    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        JWTError: If the signature, expiry, type or subject is invalid.
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)
    if not payload.get("sub"):
        msg = "Token missing subject"
        raise JWTError(msg)

    return payload

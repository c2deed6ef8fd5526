import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from .config import settings, access_token_expires
from .errors import TokenExpired, TokenInvalid

# bcrypt only reads this many bytes of the secret
MAX_PASSWORD_BYTES = 72

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
    bcrypt__truncate_error=False,
)


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def get_password_hash(password: str) -> str:
    if password_too_long(password):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a password against a stored hash; malformed hashes and over-long passwords never match."""
    if not hashed_password or password_too_long(plain_password):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


OTP_LENGTH = 6


def generate_otp(length: int = OTP_LENGTH) -> str:
    """Generate a numeric OTP code of fixed width, e.g. 100000-999999 for 6 digits."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def create_access_token(
    account_id: str,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or access_token_expires())
    to_encode = {
        "sub": account_id,
        "iat": issued_at,
        "exp": expire,
        # keeps tokens minted within the same second distinct
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, now: Optional[datetime] = None) -> str:
    """
    Verify a session token and return the account id it was issued for.

    Raises TokenInvalid for bad signatures or malformed payloads and
    TokenExpired once the expiry has passed. The returned id may no longer
    reference an existing account; callers must look it up again.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": False, "verify_iat": False, "require": ["sub", "iat", "exp"]},
        )
    except jwt.PyJWTError:
        raise TokenInvalid()

    account_id = payload.get("sub")
    expires_at = payload.get("exp")
    if not isinstance(account_id, str) or not account_id:
        raise TokenInvalid()
    if not isinstance(expires_at, (int, float)):
        raise TokenInvalid()

    current = now or datetime.now(timezone.utc)
    if current.timestamp() > expires_at:
        raise TokenExpired()
    return account_id

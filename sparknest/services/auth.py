"""
Signup, verification and login orchestration.

Account lifecycle: no row exists while an OTP is pending; the account is
created, already verified, in the same transaction that consumes the code.
"""

import functools
import logging
import secrets
from datetime import datetime
from typing import Awaitable, Callable, Optional

from starlette.concurrency import run_in_threadpool

from ..core.config import otp_expires
from ..core.database import SessionLocal, utcnow
from ..core.email import send_verification_code
from ..core.errors import (
    DuplicateAccount,
    EmailNotVerified,
    InvalidCredentials,
    InvalidOrExpiredCode,
    ValidationFailed,
)
from ..core.security import create_access_token, generate_otp, get_password_hash, verify_password
from ..models.user import User
from ..schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserPublic, VerifyOTPRequest
from ..storage import DatabaseStorage

logger = logging.getLogger(__name__)

SendCode = Callable[[str, str], Awaitable[None]]


@functools.lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return get_password_hash(secrets.token_urlsafe(16))


def public_user(user: User) -> UserPublic:
    return UserPublic(id=user.id, email=user.email, first_name=user.first_name, last_name=user.last_name)


async def start_signup(storage: DatabaseStorage, payload: SignupRequest, send_code: Optional[SendCode] = None) -> str:
    """Issue an OTP for a prospective account and email it. Also serves resend."""
    email = payload.email
    if await run_in_threadpool(storage.get_account_by_email, email):
        raise DuplicateAccount()

    otp_code = generate_otp()
    expires_at = utcnow() + otp_expires()
    pending_hash = await run_in_threadpool(get_password_hash, payload.password)

    await run_in_threadpool(
        storage.create_verification_record,
        email=email,
        code=otp_code,
        expires_at=expires_at,
        pending_password_hash=pending_hash,
        pending_first_name=payload.first_name,
        pending_last_name=payload.last_name,
    )
    logger.info("Verification code issued for %s, expires at %s", email, expires_at.isoformat())

    # The record is kept when delivery fails; a retried signup issues a new one
    sender = send_code or send_verification_code
    await sender(email, otp_code)
    return "OTP sent to your email"


def _pending_profile(record, payload: VerifyOTPRequest):
    if record.has_pending_profile:
        return record.pending_password_hash, record.pending_first_name, record.pending_last_name
    if payload.user_data is None:
        raise ValidationFailed(errors=[{"loc": ["body", "userData"], "msg": "Field required"}])
    data = payload.user_data
    return get_password_hash(data.password), data.first_name, data.last_name


def verify_signup(storage: DatabaseStorage, payload: VerifyOTPRequest, now: Optional[datetime] = None) -> AuthResponse:
    """Consume an OTP, create the verified account and issue its first session token."""
    email = payload.email
    if payload.user_data is not None and payload.user_data.email != email:
        raise ValidationFailed(errors=[{"loc": ["body", "userData", "email"], "msg": "Must match email"}])

    record = storage.find_valid_verification_record(email, payload.code, now=now)
    if not record:
        raise InvalidOrExpiredCode()

    password_hash, first_name, last_name = _pending_profile(record, payload)

    try:
        user = storage.create_account(email, password_hash, first_name, last_name, commit=False)
    except DuplicateAccount:
        logger.warning("Verification for %s lost to an existing account, code left unused", email)
        raise
    storage.set_email_verified(email, True, commit=False)
    if not storage.mark_verification_record_used(record.id, commit=False):
        # A concurrent request consumed the code first
        storage.rollback()
        raise InvalidOrExpiredCode()
    storage.commit()

    logger.info("Account %s created for %s", user.id, email)
    return AuthResponse(
        message="Account created successfully",
        token=create_access_token(user.id),
        user=public_user(user),
    )


def login(storage: DatabaseStorage, payload: LoginRequest) -> AuthResponse:
    user = storage.get_account_by_email(payload.email)
    if not user or not user.password_hash:
        # Burn the same bcrypt cost so timing does not reveal unknown emails
        verify_password(payload.password, _dummy_hash())
        logger.info("Login rejected for %s: no password account", payload.email)
        raise InvalidCredentials()
    if not verify_password(payload.password, user.password_hash):
        logger.info("Login rejected for %s: wrong password", payload.email)
        raise InvalidCredentials()
    if not user.is_email_verified:
        raise EmailNotVerified()

    return AuthResponse(
        message="Login successful",
        token=create_access_token(user.id),
        user=public_user(user),
    )


def purge_expired_codes() -> int:
    with SessionLocal() as db:
        removed = DatabaseStorage(db).purge_expired_verification_records()
    if removed:
        logger.info("Purged %d expired verification codes", removed)
    return removed

"""Tests for the credential hasher, OTP generator and session token issuer."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from sparknest.core.config import settings
from sparknest.core.errors import TokenExpired, TokenInvalid
from sparknest.core.security import (
    create_access_token,
    decode_access_token,
    generate_otp,
    get_password_hash,
    verify_password,
)


class TestCredentialHasher:
    """Password hashing and verification."""

    def test_hash_verifies_original_password(self):
        hashed = get_password_hash("pw12345678")
        assert hashed != "pw12345678"
        assert verify_password("pw12345678", hashed)

    def test_other_password_does_not_verify(self):
        hashed = get_password_hash("pw12345678")
        assert not verify_password("pw12345679", hashed)

    def test_hash_is_salted(self):
        assert get_password_hash("same-password") != get_password_hash("same-password")

    def test_hash_embeds_work_factor(self):
        hashed = get_password_hash("pw12345678")
        assert hashed.startswith("$2b$")
        assert f"${settings.BCRYPT_ROUNDS:02d}$" in hashed

    def test_passwords_sharing_72_byte_prefix_do_not_collide(self):
        prefix = "a" * 72
        hashed = get_password_hash(prefix)
        assert verify_password(prefix, hashed)
        assert not verify_password(prefix + "one", hashed)

    def test_over_long_password_cannot_be_hashed(self):
        with pytest.raises(ValueError):
            get_password_hash("a" * 72 + "two")
        # 37 two-byte characters is 74 bytes
        with pytest.raises(ValueError):
            get_password_hash("\u00e9" * 37)

    @pytest.mark.parametrize("bad_hash", ["", None, "not-a-hash", "$2b$12$truncated"])
    def test_malformed_hash_returns_false(self, bad_hash):
        assert verify_password("pw12345678", bad_hash) is False


class TestOTPGenerator:
    """Numeric one-time codes."""

    def test_codes_are_six_digits_in_range(self):
        for _ in range(500):
            code = generate_otp()
            assert len(code) == 6
            assert code.isdigit()
            assert 100000 <= int(code) <= 999999

    def test_codes_rarely_collide(self):
        codes = {generate_otp() for _ in range(200)}
        # 200 draws from 900k values; a handful of repeats would point at a broken source
        assert len(codes) >= 195

    def test_custom_width(self):
        code = generate_otp(length=8)
        assert len(code) == 8
        assert 10_000_000 <= int(code) <= 99_999_999


class TestSessionTokens:
    """Signed, time-limited bearer tokens."""

    def test_round_trip_returns_account_id(self):
        token = create_access_token("account-1")
        assert decode_access_token(token) == "account-1"

    def test_valid_after_six_days_expired_after_eight(self):
        issued = datetime.now(timezone.utc)
        token = create_access_token("account-1", now=issued)

        assert decode_access_token(token, now=issued + timedelta(days=6)) == "account-1"
        with pytest.raises(TokenExpired):
            decode_access_token(token, now=issued + timedelta(days=8))

    def test_tokens_for_same_account_are_distinct(self):
        assert create_access_token("account-1") != create_access_token("account-1")

    def test_tampered_token_is_invalid(self):
        token = create_access_token("account-1")
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(TokenInvalid):
            decode_access_token(tampered)

    def test_token_signed_with_other_key_is_invalid(self):
        now = datetime.now(timezone.utc)
        forged = jwt.encode(
            {"sub": "account-1", "iat": now, "exp": now + timedelta(days=1)},
            "some-other-key",
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(TokenInvalid):
            decode_access_token(forged)

    def test_token_without_subject_is_invalid(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": now, "exp": now + timedelta(days=1)},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(TokenInvalid):
            decode_access_token(token)

    def test_unsigned_token_is_invalid(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode({"sub": "account-1", "iat": now, "exp": now + timedelta(days=1)}, None, algorithm="none")
        with pytest.raises(TokenInvalid):
            decode_access_token(token)

    def test_garbage_is_invalid(self):
        with pytest.raises(TokenInvalid):
            decode_access_token("not.a.token")

"""
Unit tests for the bcrypt hasher, JWT issuer and rate limiter adapters.
"""

import re
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.adapters.security.hashing import BcryptHasher
from src.adapters.security.rate_limit import LimitsRateLimiter
from src.adapters.security.tokens import JwtTokenIssuer

SECRET = "unit-test-secret-key-that-is-long-enough"


class TestBcryptHasher:
    """Tests for BcryptHasher."""

    def test_hash_is_bcrypt(self) -> None:
        digest = BcryptHasher(cost=4).hash("password123")

        assert re.match(r"^\$2[aby]\$04\$", digest)
        assert digest != "password123"

    def test_default_cost_at_least_10(self) -> None:
        digest = BcryptHasher().hash("password123")

        assert int(digest.split("$")[2]) >= 10

    def test_verify_roundtrip(self) -> None:
        hasher = BcryptHasher(cost=4)
        digest = hasher.hash("042917")

        assert hasher.verify("042917", digest)
        assert not hasher.verify("042918", digest)

    def test_salted(self) -> None:
        hasher = BcryptHasher(cost=4)

        assert hasher.hash("same") != hasher.hash("same")

    def test_malformed_digest_is_mismatch(self) -> None:
        assert BcryptHasher(cost=4).verify("anything", "not-a-bcrypt-hash") is False

    def test_long_secrets_accepted(self) -> None:
        hasher = BcryptHasher(cost=4)
        long_password = "x" * 100

        assert hasher.verify(long_password, hasher.hash(long_password))


class TestJwtTokenIssuer:
    """Tests for JwtTokenIssuer."""

    def test_claims_roundtrip(self) -> None:
        issuer = JwtTokenIssuer(secret_key=SECRET)

        claims = issuer.decode(issuer.issue({"sub": "abc", "email": "a@b.com"}))

        assert claims["sub"] == "abc"
        assert claims["email"] == "a@b.com"
        assert "iat" in claims

    def test_default_ttl_is_seven_days(self) -> None:
        issuer = JwtTokenIssuer(secret_key=SECRET)

        claims = issuer.decode(issuer.issue({"sub": "abc"}))

        assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())

    def test_explicit_ttl(self) -> None:
        issuer = JwtTokenIssuer(secret_key=SECRET)

        claims = issuer.decode(issuer.issue({"sub": "abc"}, ttl=timedelta(minutes=5)))

        assert claims["exp"] - claims["iat"] == 300

    def test_expired_token_rejected(self) -> None:
        issuer = JwtTokenIssuer(secret_key=SECRET)
        token = issuer.issue({"sub": "abc"}, ttl=timedelta(seconds=-10))

        with pytest.raises(jwt.ExpiredSignatureError):
            issuer.decode(token)

    def test_other_secret_rejected(self) -> None:
        token = JwtTokenIssuer(secret_key=SECRET).issue({"sub": "abc"})

        with pytest.raises(jwt.InvalidSignatureError):
            JwtTokenIssuer(secret_key=SECRET + "-other").decode(token)

    def test_token_is_hs256_by_default(self) -> None:
        token = JwtTokenIssuer(secret_key=SECRET).issue({"sub": "abc"})

        assert jwt.get_unverified_header(token)["alg"] == "HS256"
        assert jwt.decode(token, SECRET, algorithms=["HS256"])["exp"] > datetime.now(
            timezone.utc
        ).timestamp()


class TestLimitsRateLimiter:
    """Tests for LimitsRateLimiter."""

    def test_allows_five_then_blocks(self) -> None:
        limiter = LimitsRateLimiter("5/15 minutes")

        results = [limiter.hit("signup-init", "1.2.3.4") for _ in range(6)]

        assert results == [True] * 5 + [False]

    def test_buckets_are_independent(self) -> None:
        limiter = LimitsRateLimiter("5/15 minutes")
        for _ in range(5):
            limiter.hit("signup-init", "1.2.3.4")

        assert limiter.hit("resend-otp", "1.2.3.4") is True
        assert limiter.hit("signup-init", "1.2.3.4") is False

    def test_identities_are_independent(self) -> None:
        limiter = LimitsRateLimiter("1/15 minutes")

        assert limiter.hit("signup-init", "a") is True
        assert limiter.hit("signup-init", "b") is True
        assert limiter.hit("signup-init", "a") is False

    def test_separate_instances_do_not_share_memory(self) -> None:
        first = LimitsRateLimiter("1/15 minutes")
        second = LimitsRateLimiter("1/15 minutes")

        assert first.hit("bucket", "id") is True
        assert second.hit("bucket", "id") is True

    def test_reset_clears_counters(self) -> None:
        limiter = LimitsRateLimiter("1/15 minutes")
        limiter.hit("bucket", "id")

        limiter.reset()

        assert limiter.hit("bucket", "id") is True

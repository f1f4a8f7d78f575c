"""
Adversarial tests for account and signup enumeration.

Verifies that responses do not reveal whether an email has an account
or a pending signup, and that login does equal hashing work either way.
"""

from unittest.mock import patch

import pytest

from src.domain.exceptions import InvalidCredentials, PendingSignupNotFound
from src.domain.signup import SignupService

pytestmark = pytest.mark.adversarial


def register(service: SignupService, email: str, password: str) -> None:
    service.code_generator = lambda: "123456"
    service.signup_init(email, password, "client")
    service.verify_signup(email, "123456")


class TestLoginEnumeration:
    """Login must not reveal account existence."""

    def test_same_error_for_unknown_and_wrong_password(self, service: SignupService) -> None:
        register(service, "known@example.com", "secret1")

        with pytest.raises(InvalidCredentials) as unknown:
            service.login("unknown@example.com", "secret1")
        with pytest.raises(InvalidCredentials) as wrong:
            service.login("known@example.com", "not-it")

        assert str(unknown.value) == str(wrong.value)

    def test_unknown_email_still_runs_password_check(self, service: SignupService) -> None:
        register(service, "known@example.com", "secret1")

        with patch.object(service.hasher, "verify", wraps=service.hasher.verify) as verify:
            with pytest.raises(InvalidCredentials):
                service.login("unknown@example.com", "secret1")
            with pytest.raises(InvalidCredentials):
                service.login("known@example.com", "not-it")

        assert verify.call_count == 2
        unknown_digest = verify.call_args_list[0].args[1]
        assert unknown_digest.startswith("$2")


class TestPendingSignupEnumeration:
    """verify_signup must not distinguish expired from never-started."""

    def test_expired_and_unknown_identical(self, service: SignupService, clock) -> None:
        service.code_generator = lambda: "123456"
        service.signup_init("expired@example.com", "secret1", "client")
        clock.advance(minutes=11)

        with pytest.raises(PendingSignupNotFound) as expired:
            service.verify_signup("expired@example.com", "123456")
        with pytest.raises(PendingSignupNotFound) as unknown:
            service.verify_signup("never@example.com", "123456")

        assert str(expired.value) == str(unknown.value)

    def test_consumed_and_unknown_identical(self, service: SignupService) -> None:
        register(service, "done@example.com", "secret1")

        with pytest.raises(PendingSignupNotFound) as consumed:
            service.verify_signup("done@example.com", "123456")
        with pytest.raises(PendingSignupNotFound) as unknown:
            service.verify_signup("never@example.com", "123456")

        assert str(consumed.value) == str(unknown.value)

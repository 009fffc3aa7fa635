"""Tests for the per-account OTP challenge slot."""

from datetime import timedelta

import pytest

from device_guard.common.constants import OTPConstants, StorageKeys
from device_guard.core.types import ChallengeStatus, DeviceClass
from device_guard.otp.challenge import OTPChallengeManager, generate_code


class TestGenerateCode:

    def test_codes_are_six_digits(self):
        for _ in range(200):
            code = generate_code()
            assert OTPConstants.CODE_MIN <= code <= OTPConstants.CODE_MAX


class TestOTPChallengeManager:
    """Tests for OTPChallengeManager."""

    @pytest.fixture
    def challenges(self, store):
        return OTPChallengeManager(store)

    def _issue(self, challenges, account, now, device_id="dev-new"):
        return challenges.issue(
            account,
            device_id=device_id,
            agent="Mozilla/5.0",
            ip_address="203.0.113.7",
            device_class=DeviceClass.MOBILE,
            now=now,
        )

    def test_issue_stores_pending_challenge(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)

        challenge = challenges.peek(alice)
        assert challenge.code == code
        assert challenge.claiming_device_id == "dev-new"
        assert challenge.ip_address == "203.0.113.7"
        assert challenge.device_class == DeviceClass.MOBILE
        assert challenge.created_at == now
        assert challenge.status == ChallengeStatus.PENDING

    def test_correct_code_verifies(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)

        assert challenges.verify(alice, str(code), now + timedelta(minutes=1))

    def test_verify_accepts_integer_submission(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)

        assert challenges.verify(alice, code, now)

    def test_wrong_code_keeps_challenge(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)
        wrong = OTPConstants.CODE_MIN if code != OTPConstants.CODE_MIN else OTPConstants.CODE_MAX

        assert challenges.verify(alice, str(wrong), now) is False
        assert challenges.peek(alice) is not None
        assert challenges.verify(alice, str(code), now)

    def test_verify_never_consumes(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)

        challenges.verify(alice, str(code), now)

        assert challenges.peek(alice) is not None

    def test_code_verifies_just_before_expiry(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)

        assert challenges.verify(alice, str(code), now + timedelta(minutes=9, seconds=59))

    def test_code_verifies_at_exact_expiry(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)

        assert challenges.verify(alice, str(code), now + OTPConstants.TTL)

    def test_code_fails_after_expiry(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)

        assert challenges.verify(alice, str(code), now + timedelta(minutes=10, seconds=1)) is False
        assert challenges.verify(alice, str(code), now + timedelta(minutes=11)) is False

    def test_new_issue_invalidates_previous_code(self, challenges, alice, now):
        first = self._issue(challenges, alice, now, device_id="dev-1")
        second = self._issue(challenges, alice, now + timedelta(seconds=5), device_id="dev-2")

        assert challenges.peek(alice).claiming_device_id == "dev-2"
        assert challenges.verify(alice, str(second), now + timedelta(seconds=6))
        if first != second:
            assert challenges.verify(alice, str(first), now + timedelta(seconds=6)) is False

    def test_consume_clears_slot(self, challenges, alice, store, now):
        code = self._issue(challenges, alice, now)

        challenges.consume(alice)

        assert challenges.peek(alice) is None
        assert store.get_attribute(alice, StorageKeys.DEVICE_OTP) is None
        assert challenges.verify(alice, str(code), now) is False

    def test_consume_without_challenge_is_noop(self, challenges, alice):
        challenges.consume(alice)

        assert challenges.peek(alice) is None

    @pytest.mark.parametrize(
        "submitted", [None, "", "abc", "12 34", True, "-123456", "\u00b2" * 6, "1" * 5000]
    )
    def test_malformed_submissions_fail(self, challenges, alice, now, submitted):
        self._issue(challenges, alice, now)

        assert challenges.verify(alice, submitted, now) is False

    def test_verify_without_challenge_fails(self, challenges, alice, now):
        assert challenges.verify(alice, "123456", now) is False

    def test_malformed_stored_challenge_reads_as_none(self, challenges, alice, store):
        store.set_attribute(alice, StorageKeys.DEVICE_OTP, {"code": "nope"})

        assert challenges.peek(alice) is None

    def test_challenges_are_per_account(self, challenges, alice, admin, now):
        code = self._issue(challenges, alice, now)

        assert challenges.peek(admin) is None
        assert challenges.verify(admin, str(code), now) is False

    def test_is_live_boundary(self, challenges, alice, now):
        self._issue(challenges, alice, now)
        challenge = challenges.peek(alice)

        assert OTPChallengeManager.is_live(challenge, now + OTPConstants.TTL)
        assert not OTPChallengeManager.is_live(
            challenge, now + OTPConstants.TTL + timedelta(seconds=1)
        )

    def test_check_uses_given_challenge(self, challenges, alice, now):
        code = self._issue(challenges, alice, now)
        snapshot = challenges.peek(alice)
        self._issue(challenges, alice, now, device_id="dev-other")

        assert challenges.check(snapshot, str(code), now) is True
        assert challenges.check(None, str(code), now) is False

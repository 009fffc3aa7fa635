"""Tests for the OTP verification page flow."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from device_guard.common.constants import Messages
from device_guard.common.exceptions import ForgeryTokenError
from device_guard.core.types import DeviceClass, VerificationStatus
from device_guard.devices.identity import InMemoryTokenStore
from device_guard.enforcement.verification import SessionHost


class FakeSession(SessionHost):
    """Session layer that remembers who it logged in."""

    def __init__(self, username=None):
        self.username = username
        self.established = []

    def is_authenticated(self, account):
        return self.username == account.username

    def establish(self, account):
        self.username = account.username
        self.established.append(account.username)


@pytest.fixture
def flow(service):
    return service.verification


@pytest.fixture
def issue(service, alice):
    def _issue(now, device_id="dev-new"):
        return service.challenges.issue(
            alice,
            device_id=device_id,
            agent="Mozilla/5.0 (Linux; Android 14)",
            ip_address="198.51.100.4",
            device_class=DeviceClass.MOBILE,
            now=now,
        )
    return _issue


class TestOpen:

    def test_unknown_username_is_inert(self, flow):
        outcome = flow.open("nobody", InMemoryTokenStore(), FakeSession())

        assert outcome.status == VerificationStatus.INERT

    def test_empty_username_is_inert(self, flow):
        assert flow.open("", InMemoryTokenStore(), FakeSession()).status == VerificationStatus.INERT

    def test_known_username_shows_form(self, flow):
        outcome = flow.open("alice", InMemoryTokenStore(), FakeSession())

        assert outcome.status == VerificationStatus.FORM

    def test_admitted_device_is_redirected(self, flow, service, alice, make_record, now):
        service.registry.approve(alice, make_record("dev-a", now))

        outcome = flow.open("alice", InMemoryTokenStore("dev-a"), FakeSession("alice"))

        assert outcome.status == VerificationStatus.REDIRECT
        assert outcome.redirect_to == "/"

    def test_session_without_approved_device_shows_form(self, flow):
        outcome = flow.open("alice", InMemoryTokenStore("dev-x"), FakeSession("alice"))

        assert outcome.status == VerificationStatus.FORM


class TestSubmit:

    def test_correct_code_admits_device(self, flow, service, alice, issue, now):
        code = issue(now)
        session = FakeSession()
        token = flow.form_token("alice")

        outcome = flow.submit(
            "alice", str(code), token, InMemoryTokenStore("dev-new"), session,
            now=now + timedelta(minutes=2),
        )

        assert outcome.status == VerificationStatus.REDIRECT
        assert outcome.redirect_to == "/"
        assert session.established == ["alice"]
        assert service.challenges.peek(alice) is None

        records = service.registry.list(alice)
        assert len(records) == 1
        assert records[0].id == "dev-new"
        assert records[0].agent == "Mozilla/5.0 (Linux; Android 14)"
        assert records[0].ip_address == "198.51.100.4"
        assert records[0].device_class == DeviceClass.MOBILE
        assert records[0].approved_at == now + timedelta(minutes=2)

    def test_approved_record_uses_claiming_device(self, flow, service, alice, issue, now):
        code = issue(now, device_id="dev-claimed")

        flow.submit(
            "alice", str(code), flow.form_token("alice"),
            InMemoryTokenStore("some-other-cookie"), FakeSession(), now=now,
        )

        assert service.registry.contains(alice, "dev-claimed")

    def test_wrong_code_retries_and_keeps_challenge(self, flow, service, alice, issue, now):
        code = issue(now)
        wrong = "100000" if code != 100000 else "999999"
        session = FakeSession()

        outcome = flow.submit(
            "alice", wrong, flow.form_token("alice"), InMemoryTokenStore(), session, now=now
        )

        assert outcome.status == VerificationStatus.RETRY
        assert outcome.error == Messages.INVALID_OR_EXPIRED_CODE
        assert service.challenges.peek(alice) is not None
        assert service.registry.list(alice) == []
        assert session.established == []

    def test_expired_code_retries(self, flow, service, alice, issue, now):
        code = issue(now)

        outcome = flow.submit(
            "alice", str(code), flow.form_token("alice"), InMemoryTokenStore(), FakeSession(),
            now=now + timedelta(minutes=10, seconds=1),
        )

        assert outcome.status == VerificationStatus.RETRY
        assert service.registry.list(alice) == []

    def test_no_challenge_retries(self, flow):
        outcome = flow.submit(
            "alice", "123456", flow.form_token("alice"), InMemoryTokenStore(), FakeSession()
        )

        assert outcome.status == VerificationStatus.RETRY

    def test_missing_form_token_is_refused(self, flow, service, alice, issue, now):
        code = issue(now)

        with pytest.raises(ForgeryTokenError):
            flow.submit("alice", str(code), None, InMemoryTokenStore(), FakeSession(), now=now)

        assert service.challenges.peek(alice) is not None

    def test_form_token_for_other_username_is_refused(self, flow, issue, now):
        code = issue(now)

        with pytest.raises(ForgeryTokenError):
            flow.submit(
                "alice", str(code), flow.form_token("admin"),
                InMemoryTokenStore(), FakeSession(), now=now,
            )

    def test_unknown_username_submission_is_inert(self, flow):
        outcome = flow.submit("nobody", "123456", None, InMemoryTokenStore(), FakeSession())

        assert outcome.status == VerificationStatus.INERT

    def test_code_cannot_be_reused(self, flow, service, alice, issue, now):
        code = issue(now)
        flow.submit(
            "alice", str(code), flow.form_token("alice"), InMemoryTokenStore(), FakeSession(), now=now
        )

        outcome = flow.submit(
            "alice", str(code), flow.form_token("alice"), InMemoryTokenStore(), FakeSession(), now=now
        )

        assert outcome.status == VerificationStatus.RETRY
        assert len(service.registry.list(alice)) == 1

    def test_code_and_record_come_from_same_challenge(self, flow, service, alice, issue, now):
        code = issue(now, device_id="dev-first")
        snapshot = service.challenges.peek(alice)
        issue(now, device_id="dev-second")

        with patch.object(service.challenges, "peek", return_value=snapshot):
            outcome = flow.submit(
                "alice", str(code), flow.form_token("alice"),
                InMemoryTokenStore(), FakeSession(), now=now,
            )

        assert outcome.status == VerificationStatus.REDIRECT
        assert [r.id for r in service.registry.list(alice)] == ["dev-first"]

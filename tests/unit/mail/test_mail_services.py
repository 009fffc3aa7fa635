"""Tests for mail backends and templates."""

import smtplib
from unittest.mock import patch

import pytest

from device_guard.common.config import Config, MailBackend
from device_guard.mail import build_mail_service
from device_guard.mail.base import LoggingMailService
from device_guard.mail.smtp import SMTPMailService
from device_guard.mail.templates import mail_check_message, new_device_code_message


class TestTemplates:

    def test_new_device_message(self):
        subject, body = new_device_code_message("Alice", 482913)

        assert subject == "Verify New Device Login"
        assert body == (
            "Hello Alice,\n\n"
            "Your verification code is: 482913\n\n"
            "This code will expire shortly.\n\n"
            "If you did not request this login, please ignore this email."
        )

    def test_check_message(self):
        subject, body = mail_check_message()

        assert subject
        assert "mail settings" in body


class TestLoggingMailService:

    def test_send_always_succeeds(self):
        assert LoggingMailService().send("a@example.com", "Subject", "Body") is True


class TestSMTPMailService:
    """Tests for SMTPMailService."""

    @pytest.fixture
    def mail_service(self):
        return SMTPMailService(
            host="smtp.example.com",
            port=587,
            username="mailer",
            password="secret",
            from_address="guard@example.com",
        )

    def test_send_success(self, mail_service):
        with patch("smtplib.SMTP") as mock_smtp:
            result = mail_service.send("alice@example.com", "Hi", "Body")

        assert result is True
        mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=10.0)
        session = mock_smtp.return_value.__enter__.return_value
        session.starttls.assert_called_once()
        session.login.assert_called_once_with("mailer", "secret")

        message = session.send_message.call_args[0][0]
        assert message["To"] == "alice@example.com"
        assert message["From"] == "guard@example.com"
        assert message["Subject"] == "Hi"

    def test_no_tls_no_login(self):
        service = SMTPMailService(host="localhost", port=25, use_tls=False)

        with patch("smtplib.SMTP") as mock_smtp:
            assert service.send("alice@example.com", "Hi", "Body") is True

        session = mock_smtp.return_value.__enter__.return_value
        session.starttls.assert_not_called()
        session.login.assert_not_called()

    def test_smtp_error_returns_false(self, mail_service):
        with patch("smtplib.SMTP") as mock_smtp:
            session = mock_smtp.return_value.__enter__.return_value
            session.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

            assert mail_service.send("alice@example.com", "Hi", "Body") is False

    def test_connection_error_returns_false(self, mail_service):
        with patch("smtplib.SMTP", side_effect=ConnectionRefusedError()):
            assert mail_service.send("alice@example.com", "Hi", "Body") is False


class TestBuildMailService:

    def test_logging_backend(self):
        assert isinstance(
            build_mail_service(Config(mail_backend=MailBackend.LOGGING)), LoggingMailService
        )

    def test_smtp_backend(self):
        config = Config(mail_backend=MailBackend.SMTP, smtp_host="mail.internal", smtp_port=2525)

        service = build_mail_service(config)

        assert isinstance(service, SMTPMailService)
        assert service.host == "mail.internal"
        assert service.port == 2525

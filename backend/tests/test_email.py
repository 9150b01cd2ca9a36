"""Tests for outgoing verification and password reset emails."""

from unittest.mock import patch

import pytest

from app.services import email


@pytest.fixture
def smtp_configured():
    with patch.object(email.settings, "smtp_user", "mailer@example.com"), \
         patch.object(email.settings, "smtp_password", "app-password"):
        yield


def _sent_message(mock_smtp):
    server = mock_smtp.return_value.__enter__.return_value
    server.send_message.assert_called_once()
    return server.send_message.call_args.args[0]


class TestSendEmail:
    """Tests for the SMTP transport."""

    def test_skips_without_credentials(self):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            assert email.send_verification_email("ada@example.com", "Ada", "abc") is False
        mock_smtp.assert_not_called()

    def test_smtp_failure_returns_false(self, smtp_configured):
        with patch("app.services.email.smtplib.SMTP", side_effect=OSError("connection refused")):
            assert email.send_password_reset_email("ada@example.com", "Ada", "abc") is False

    def test_logs_in_with_starttls(self, smtp_configured):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            assert email.send_verification_email("ada@example.com", "Ada", "abc") is True

        server = mock_smtp.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer@example.com", "app-password")


class TestVerificationEmail:
    def test_contains_verification_link(self, smtp_configured):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            email.send_verification_email("ada@example.com", "Ada", "tok123")

        msg = _sent_message(mock_smtp)
        assert msg["To"] == "ada@example.com"
        assert "Verification" in msg["Subject"]
        body = msg.as_string()
        assert f"{email.settings.frontend_url}/verify-student?token=tok123" in body
        assert "24 hours" in body

    def test_escapes_name_in_html(self, smtp_configured):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            email.send_verification_email("ada@example.com", "<b>Ada</b>", "tok123")

        html_part = _sent_message(mock_smtp).get_payload()[1]
        html_body = html_part.get_payload(decode=True).decode()
        assert "&lt;b&gt;Ada&lt;/b&gt;" in html_body
        assert "<b>Ada</b>" not in html_body


class TestPasswordResetEmail:
    def test_contains_reset_link(self, smtp_configured):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            email.send_password_reset_email("ada@example.com", "Ada", "tok456")

        msg = _sent_message(mock_smtp)
        assert "Password Reset" in msg["Subject"]
        body = msg.as_string()
        assert f"{email.settings.frontend_url}/reset-password?token=tok456" in body
        assert "1 hour" in body

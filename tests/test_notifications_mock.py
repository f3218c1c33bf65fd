import pytest
from unittest.mock import MagicMock, patch

from beauty_studio.models.booking import Booking
from beauty_studio.services.notification_service import build_confirmation_email, send_confirmation_email, send_email


@pytest.fixture
def confirmed_booking():
    return Booking.model_validate({
        "id": "b-1",
        "service_id": "bridal",
        "date": "2025-04-08",
        "time": "11:00",
        "client_name": "Elena Petrova",
        "client_email": "elena@example.com",
        "client_phone": "+359888000111",
        "status": "confirmed",
    })


def test_confirmation_email_content(confirmed_booking, studio_config):
    subject, body = build_confirmation_email(confirmed_booking, studio_config)

    assert subject == "Your Appointment Confirmation"
    assert "Dear Elena Petrova" in body
    assert "April 8, 2025 at 11:00" in body
    assert "Bridal Makeup (90 minutes)" in body


# Test Email (Mocked)
@patch("beauty_studio.services.notification_service.smtplib.SMTP")
def test_send_confirmation_email_mocked(mock_smtp_cls, confirmed_booking):
    mock_server = MagicMock()
    mock_smtp_cls.return_value = mock_server

    with patch("beauty_studio.services.notification_service.settings.SMTP_USERNAME", "user"), \
         patch("beauty_studio.services.notification_service.settings.SMTP_PASSWORD", "pass"):

        result = send_confirmation_email(confirmed_booking)

    assert result is True
    mock_smtp_cls.assert_called_once()
    mock_server.starttls.assert_called_once()
    mock_server.login.assert_called_with("user", "pass")
    args, _ = mock_server.sendmail.call_args
    assert args[1] == "elena@example.com"
    mock_server.quit.assert_called_once()


def test_send_confirmation_disabled_in_config(confirmed_booking, studio_config):
    studio_config["notifications"]["email_enabled"] = False

    with patch("beauty_studio.services.notification_service.load_studio_config", return_value=studio_config), \
         patch("beauty_studio.services.notification_service.smtplib.SMTP") as mock_smtp_cls:
        assert send_confirmation_email(confirmed_booking) is False

    mock_smtp_cls.assert_not_called()


def test_send_email_without_credentials():
    with patch("beauty_studio.services.notification_service.settings.SMTP_USERNAME", ""), \
         patch("beauty_studio.services.notification_service.smtplib.SMTP") as mock_smtp_cls:
        assert send_email("Subject", "Body", "client@test.com") is False

    mock_smtp_cls.assert_not_called()


@patch("beauty_studio.services.notification_service.smtplib.SMTP")
def test_send_email_smtp_failure_returns_false(mock_smtp_cls):
    mock_server = MagicMock()
    mock_server.login.side_effect = OSError("auth failed")
    mock_smtp_cls.return_value = mock_server

    with patch("beauty_studio.services.notification_service.settings.SMTP_USERNAME", "user"), \
         patch("beauty_studio.services.notification_service.settings.SMTP_PASSWORD", "pass"):
        assert send_email("Subject", "Body", "client@test.com") is False

    mock_server.quit.assert_called_once()

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from beauty_studio.core.config import settings
from beauty_studio.core.config_loader import get_service_duration, get_service_name, load_studio_config
from beauty_studio.core.dates import format_long_date
from beauty_studio.core.logger import logger
from beauty_studio.models.booking import Booking

DEFAULT_SUBJECT = "Your Appointment Confirmation"
DEFAULT_TEMPLATE = "Dear {name},\n\nYour appointment has been confirmed for {date} at {time}.\nService: {service}\n"


def send_email(subject: str, body: str, to_email: str) -> bool:
    """
    Sends a plain-text email over SMTP (STARTTLS).
    Returns: True if successful, False otherwise.
    """
    if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
        logger.error("❌ SMTP credentials missing (SMTP_USERNAME / SMTP_PASSWORD).")
        return False

    try:
        msg = MIMEMultipart()
        msg['From'] = settings.SMTP_USERNAME
        msg['To'] = to_email
        msg['Subject'] = subject
        msg.attach(MIMEText(body, 'plain'))

        server = smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT)
        try:
            server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(settings.SMTP_USERNAME, to_email, msg.as_string())
        finally:
            server.quit()

        logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send email to {to_email}: {e}")
        return False


def build_confirmation_email(booking: Booking, config: dict) -> tuple:
    notif_config = config.get("notifications", {})
    fields = {
        "name": booking.client_name,
        "date": format_long_date(booking.date),
        "time": booking.time,
        "service": get_service_name(config, booking.service_id.value),
        "duration": get_service_duration(config, booking.service_id.value) or "",
        "studio_name": config.get("studio_name", "Beauty Studio"),
    }
    subject = notif_config.get("email_subject", DEFAULT_SUBJECT).format(**fields)
    body = notif_config.get("email_template", DEFAULT_TEMPLATE).format(**fields)
    return subject, body


def send_confirmation_email(booking: Booking) -> bool:
    """
    Sends the appointment confirmation to the client.
    Never raises: a failure is logged and reported as False.
    """
    try:
        config = load_studio_config()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"❌ Cannot send confirmation, studio config unavailable: {e}")
        return False

    if not config.get("notifications", {}).get("email_enabled", False):
        logger.info("ℹ️ Email notifications are disabled in config.")
        return False

    try:
        subject, body = build_confirmation_email(booking, config)
    except (KeyError, ValueError) as e:
        logger.error(f"❌ Error formatting confirmation email: {e}")
        return False

    logger.info(f"📤 Sending confirmation for booking {booking.id} to {booking.client_email}")
    return send_email(subject, body, booking.client_email)

"""
Booking emails via SMTP (Google Gmail or other).
Set SMTP_USER, SMTP_PASSWORD (and optionally NOTIFY_FROM) in .env. Use a Gmail App Password (not your normal password).
Every sender returns True if the message went out and False if it was skipped or failed; none raise.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from app.config import settings

logger = logging.getLogger(__name__)


def _from_address() -> str:
    if (settings.notify_from or "").strip():
        return settings.notify_from.strip()
    user = (settings.smtp_user or "").strip()
    if user:
        return f"TouristGuide <{user}>"
    return "TouristGuide <noreply@localhost>"


def send_email(to_email: str | None, subject: str, lines: list[str]) -> bool:
    """Send one plain-text + HTML message. Lines are joined with newlines; the HTML part is the escaped text."""
    to_email = (to_email or "").strip()
    if not to_email:
        return False
    user = (settings.smtp_user or "").strip()
    password = (settings.smtp_password or "").strip()
    if not user or not password:
        logger.debug("SMTP_USER or SMTP_PASSWORD not set; skipping email to %s", to_email)
        return False
    body = "\n".join(lines)
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _from_address()
    msg["To"] = to_email
    msg.attach(MIMEText(body, "plain"))
    msg.attach(MIMEText(f"<pre style='font-family:sans-serif'>{escape(body)}</pre>", "html"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            server.starttls()
            server.login(user, password)
            server.sendmail(user, [to_email], msg.as_string())
        logger.info("Email sent to %s: %s", to_email, subject)
        return True
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        return False


class BookingNotifier:
    """Guest/host booking emails and feedback reminders. Injected into the engine so tests can swap it."""

    def send_guest_confirmation(
        self, to_email: str | None, guest_name: str, activity, date_str: str, slot_label: str, guests: int
    ) -> bool:
        lines = [
            f"Dear {guest_name},",
            "",
            f'Your booking for "{activity.title}" on {date_str} at {slot_label} has been confirmed.',
            f"Address: {activity.address or ''}",
            f"Hosted By: {activity.host_name or 'Host'}",
            f"Number of Guests: {guests}",
            "",
            "Thank you for booking with us!",
        ]
        return send_email(to_email, "Booking Confirmation", lines)

    def send_host_new_booking(
        self, to_email: str | None, guest_name: str, activity, date_str: str, slot_label: str, guests: int
    ) -> bool:
        lines = [
            f"Dear {activity.host_name or 'Host'},",
            "",
            f'{guest_name} has just booked your activity: "{activity.title}".',
            f"Date of Booking: {date_str}",
            f"Time Slot: {slot_label}",
            f"Number of Guests: {guests}",
            "",
            "Thank you for hosting on our platform!",
        ]
        return send_email(to_email, "New Booking Received", lines)

    def send_feedback_reminder(self, to_email: str | None, guest_name: str, activity) -> bool:
        lines = [
            f"Dear {guest_name},",
            "",
            f'Thank you for booking "{activity.title}" with us. We hope you had a great experience!',
            "",
            "We'd love to hear your feedback. Open the Trips section of the app to review this activity.",
            "",
            "Best regards,",
            "The TouristGuide Team",
        ]
        return send_email(to_email, f"Your Feedback Matters - {activity.title}", lines)

"""
Submission notifications

Admin alert for every stored lead or application, plus a confirmation to the
submitter in production. Sent over SMTP when configured; otherwise the message
is written to the log. Delivery runs as a FastAPI background task, after the
response is on its way.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape
from typing import Optional

from backend.nightnurse.core.errors import NotificationError
from backend.nightnurse.core.settings import Settings
from backend.nightnurse.core.time import utc_now

logger = logging.getLogger(__name__)

FROM_NAME = "Tahoe Night Nurse"
DUPLICATE_NOTICE = "DUPLICATE EMAIL DETECTED (within 30 days)"

PARENT_FIELDS = [
    ("Name", "full_name", None),
    ("Email", "email", None),
    ("Phone", "phone", "Not provided"),
    ("Location", "location", None),
    ("Due/Age", "due_or_age", None),
    ("Start Timeframe", "start_timeframe", None),
    ("Notes", "notes", "None"),
]

CAREGIVER_FIELDS = [
    ("Name", "full_name", None),
    ("Email", "email", None),
    ("Phone", "phone", None),
    ("Base Location", "base_location", None),
    ("Willing Regions", "willing_regions", None),
    ("Experience", "experience_years", None),
    ("Certifications", "certifications", None),
    ("Availability", "availability_notes", "Not specified"),
    ("Experience Summary", "experience_summary", "Not provided"),
]


def _display(record: dict, key: str, fallback: Optional[str]) -> str:
    value = record.get(key)
    if isinstance(value, (list, tuple)):
        value = ", ".join(value)
    if value in (None, ""):
        return fallback or ""
    return str(value)


def _first_name(record: dict) -> str:
    parts = (record.get("full_name") or "").split()
    return parts[0] if parts else "there"


class Notifier:
    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def smtp_configured(self) -> bool:
        return bool(self.settings.smtp_host)

    @property
    def sends_confirmations(self) -> bool:
        return self.settings.is_production

    def build_message(
        self, *, to: str, subject: str, text_body: str, html_body: str
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((FROM_NAME, self.settings.from_email))
        msg["To"] = to
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def send_admin_notification(self, kind: str, record: dict, is_duplicate: bool) -> None:
        if not self.settings.admin_email:
            logger.warning("ADMIN_EMAIL is not set; skipping admin notification for %s submission", kind)
            return

        if kind == "parent":
            subject = f"[TNN] New Parent Lead - {record.get('full_name', '')}"
            heading = "New Parent Lead Received!"
            fields = PARENT_FIELDS
        else:
            subject = f"[TNN] New Caregiver Application - {record.get('full_name', '')}"
            heading = "New Caregiver Application Received!"
            fields = CAREGIVER_FIELDS

        submitted = utc_now().strftime("%Y-%m-%d %H:%M UTC")
        lines = [heading, ""]
        lines += [f"{label}: {_display(record, key, fallback)}" for label, key, fallback in fields]
        if is_duplicate:
            lines += ["", DUPLICATE_NOTICE]
        lines += [
            "",
            f"Submitted: {submitted}",
            f"User Agent: {record.get('user_agent') or 'Unknown'}",
            f"IP Address: {record.get('ip_addr') or 'Unknown'}",
        ]

        html_parts = [f"<h2>{escape(heading)}</h2>"]
        if is_duplicate:
            html_parts.append(f'<p style="color: #dc2626; font-weight: bold;">{DUPLICATE_NOTICE}</p>')
        html_parts += [
            f"<p><strong>{escape(label)}:</strong> {escape(_display(record, key, fallback))}</p>"
            for label, key, fallback in fields
        ]
        html_parts.append(f"<hr><p><small>Submitted: {escape(submitted)}</small></p>")

        msg = self.build_message(
            to=self.settings.admin_email,
            subject=subject,
            text_body="\n".join(lines),
            html_body="\n".join(html_parts),
        )
        recipients = [self.settings.admin_email]
        if self.settings.bcc_archive_email:
            recipients.append(self.settings.bcc_archive_email)
        self.deliver(msg, recipients)

    def send_user_confirmation(self, kind: str, record: dict) -> None:
        email = record.get("email")
        if not email:
            return
        first_name = _first_name(record)
        if kind == "parent":
            subject = "Thanks - You're on the Tahoe Night Nurse Priority List"
            paragraphs = [
                f"Hi {first_name},",
                "Thanks for joining the Tahoe Night Nurse priority list!",
                "We're building a trusted network of certified night nurses right here in the Lake Tahoe "
                "region, and you're among the first to know when we launch.",
                f"You'll get priority access when we launch in your area ({record.get('location', '')}). "
                "No spam, just the important updates.",
                "Have questions? Just reply to this email.",
                "Best,\nThe Tahoe Night Nurse Team",
            ]
        else:
            subject = "Thanks for Your Caregiver Application - Tahoe Night Nurse"
            paragraphs = [
                f"Hi {first_name},",
                "Thank you for your interest in joining the Tahoe Night Nurse team!",
                "We received your application and we're excited to learn more about your background in "
                "newborn care. Our team will review your application and reach out within the next few days.",
                "Best regards,\nThe Tahoe Night Nurse Team",
            ]

        text_body = "\n\n".join(paragraphs)
        html_body = "\n".join(f"<p>{escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs)
        msg = self.build_message(to=email, subject=subject, text_body=text_body, html_body=html_body)
        self.deliver(msg, [email])

    def deliver(self, msg: MIMEMultipart, recipients: list[str]) -> None:
        if not self.smtp_configured:
            logger.info("Email not configured; would send %r to %s", msg["Subject"], ", ".join(recipients))
            return

        settings = self.settings
        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as server:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
                if settings.smtp_user and settings.smtp_pass:
                    server.login(settings.smtp_user, settings.smtp_pass)
                server.sendmail(settings.from_email, recipients, msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Failed to send {msg['Subject']!r}: {exc}") from exc
        logger.info("Email sent: %r to %s", msg["Subject"], ", ".join(recipients))


def dispatch_submission_notifications(notifier: Notifier, kind: str, record: dict, is_duplicate: bool) -> None:
    """Background task: send notifications for a stored submission, never raising."""
    try:
        notifier.send_admin_notification(kind, record, is_duplicate)
        if notifier.sends_confirmations:
            notifier.send_user_confirmation(kind, record)
    except NotificationError:
        logger.exception("Email send error for %s submission", kind)
    except Exception:
        # The submission is already stored; a broken notifier must not surface
        logger.exception("Unexpected error while notifying about %s submission", kind)

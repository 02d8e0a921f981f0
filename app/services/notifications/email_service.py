"""Admin notification e-mail.

When SMTP or the admin recipient is not configured, notifications are
logged and skipped. Delivery failures are logged, never raised.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

from starlette.concurrency import run_in_threadpool

from app.core.config import (
    ADMIN_NOTIFICATION_EMAIL,
    EMAIL_FROM,
    SMTP_HOST,
    SMTP_PASS,
    SMTP_PORT,
    SMTP_SECURE,
    SMTP_USER,
)

logger = logging.getLogger(__name__)


def _build_message(sender: str, recipient: str, subject: str, text: str, html: str | None) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = subject
    message.set_content(text)
    if html:
        message.add_alternative(html, subtype="html")
    return message


def _deliver(message: EmailMessage) -> None:
    context = ssl.create_default_context()
    if SMTP_SECURE:
        with smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=15) as smtp:
            if SMTP_USER and SMTP_PASS:
                smtp.login(SMTP_USER, SMTP_PASS)
            smtp.send_message(message)
        return

    with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=15) as smtp:
        smtp.ehlo()
        if smtp.has_extn("starttls"):
            smtp.starttls(context=context)
        if SMTP_USER and SMTP_PASS:
            smtp.login(SMTP_USER, SMTP_PASS)
        smtp.send_message(message)


async def send_admin_notification(subject: str, text: str, html: str | None = None) -> bool:
    if not (SMTP_HOST and EMAIL_FROM and ADMIN_NOTIFICATION_EMAIL):
        logger.warning("Missing SMTP configuration or admin recipient; notification skipped", extra={"subject": subject})
        return False

    message = _build_message(EMAIL_FROM, ADMIN_NOTIFICATION_EMAIL, subject, text, html)

    try:
        await run_in_threadpool(_deliver, message)
    except Exception:
        logger.exception("Failed to send admin notification", extra={"subject": subject})
        return False

    logger.info("Admin notification sent", extra={"subject": subject})
    return True

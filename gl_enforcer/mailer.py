"""Plain SMTP delivery of HTML reports. No TLS, no authentication."""

from __future__ import annotations

import logging
import smtplib
from email.mime.text import MIMEText

from gl_enforcer.config import EmailConfig
from gl_enforcer.errors import DeliveryError
from gl_enforcer.logging_utils import LOGGER_NAME

DEFAULT_SMTP_TIMEOUT = 30

logger = logging.getLogger(LOGGER_NAME)


def build_message(email: EmailConfig, subject: str, body: str) -> MIMEText:
    page = (
        "<html>\r\n"
        " <head>\r\n"
        f"  <title>{subject}</title>\r\n"
        " </head>\r\n"
        " <body>\r\n"
        f"{body}\r\n"
        " </body>\r\n"
        "</html>"
    )
    msg = MIMEText(page, "html", "utf-8")
    msg["From"] = email.sender
    msg["To"] = ", ".join(email.to)
    msg["Subject"] = subject
    return msg


def send_email(email: EmailConfig, subject: str, body: str, timeout: int = DEFAULT_SMTP_TIMEOUT) -> bool:
    """Send ``body`` as HTML. Returns False when delivery is not configured."""
    if not email.ready:
        logger.debug("Skipping email as from, server or port is not set")
        return False

    msg = build_message(email, subject, body)
    try:
        with smtplib.SMTP(host=email.server, port=email.port, timeout=timeout) as client:
            client.sendmail(email.sender, email.to, msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        raise DeliveryError(e) from e

    logger.info(f"Sent '{subject}' to {', '.join(email.to)}")
    return True

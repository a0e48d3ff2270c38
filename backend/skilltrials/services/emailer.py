import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path

from .. import config

logger = logging.getLogger(__name__)

RESET_TEMPLATE = "forgotpassword.html"
RESET_LINK_PLACEHOLDER = "{{reset_link}}"


def build_reset_link(token: str) -> str:
    return f"{config.RESET_LINK_BASE}{token}"


def render_reset_email(token: str) -> str:
    template = (Path(config.TEMPLATE_DIR) / RESET_TEMPLATE).read_text(encoding="utf-8")
    return template.replace(RESET_LINK_PLACEHOLDER, build_reset_link(token))


def send_password_reset_email(*, to_email: str, token: str) -> None:
    """
    Sends the password reset email over SMTP (STARTTLS on 587 by default).

    Env vars:
      SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM, SMTP_TLS
    """
    host = config.SMTP_HOST
    user = config.SMTP_USER
    password = config.SMTP_PASS
    mail_from = config.SMTP_FROM or user

    if not host or not user or not password or not mail_from:
        raise RuntimeError("SMTP is not configured (missing SMTP_HOST/SMTP_USER/SMTP_PASS/SMTP_FROM).")

    html = render_reset_email(token)

    msg = EmailMessage()
    msg["Subject"] = config.MAIL_SUBJECT
    msg["From"] = mail_from
    msg["To"] = to_email
    msg.set_content(f"Reset your password: {build_reset_link(token)}")
    msg.add_alternative(html, subtype="html")

    logger.info("Connecting to %s:%s (TLS=%s)", host, config.SMTP_PORT, config.SMTP_TLS)
    with smtplib.SMTP(host, config.SMTP_PORT, timeout=15) as smtp:
        smtp.ehlo()
        if config.SMTP_TLS:
            smtp.starttls()
            smtp.ehlo()
        smtp.login(user, password)
        smtp.send_message(msg)
    logger.info("Password reset email sent to %s", to_email)


def deliver_password_reset_email(to_email: str, token: str) -> bool:
    """
    Background-task entry point. Delivery failures are logged and swallowed:
    the reset token is already persisted and nothing is retried.
    """
    try:
        send_password_reset_email(to_email=to_email, token=token)
        return True
    except Exception as e:
        logger.error("Failed to send password reset email to %s: %s: %s", to_email, type(e).__name__, e)
        return False

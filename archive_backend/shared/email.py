# archive_backend/shared/email.py

# Outbound email: verification links, password reset links and
# contribution messages. SMTP is blocking, so sending runs in a worker thread.

import asyncio
import html
import re
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional, Tuple

from ..config.settings import settings


def get_base_url() -> str:
    """Public base URL used to build links in outgoing emails."""
    if settings.BASE_URL:
        return settings.BASE_URL.rstrip("/")
    return "http://localhost:8000"


def _html_to_text(body: str) -> str:
    return re.sub(r"<[^>]*>", "", body)


def _deliver(message: EmailMessage) -> None:
    context = ssl.create_default_context()
    with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=context, timeout=20) as smtp:
        if settings.EMAIL_USER and settings.EMAIL_PASS:
            smtp.login(settings.EMAIL_USER, settings.EMAIL_PASS)
        smtp.send_message(message)


async def send_mail(to: str, subject: str, html_body: str, text: Optional[str] = None) -> None:
    """
    Sends an HTML email with a plain-text alternative.
    Raises the underlying smtplib/OSError on failure; callers decide whether a
    failed delivery should abort the operation.
    """
    if not settings.EMAIL_USER:
        raise RuntimeError("EMAIL_USER is not configured; cannot send email.")

    message = EmailMessage()
    message["From"] = formataddr((settings.MAIL_SENDER_NAME, settings.EMAIL_USER))
    message["To"] = to
    message["Reply-To"] = settings.EMAIL_USER
    message["X-Priority"] = "1"
    message["Subject"] = subject
    message.set_content(text or _html_to_text(html_body))
    message.add_alternative(html_body, subtype="html")

    await asyncio.to_thread(_deliver, message)
    print(f"Email '{subject}' sent to {to}.")


# --- Message builders: each returns (subject, html) ---

def verification_email(token: str, reissued: bool = False) -> Tuple[str, str]:
    link = f"{get_base_url()}/verify/{token}"
    subject = "Confirm your Chilahati Archive account"
    if reissued:
        body = (
            f'<p>An unverified account already exists. Please <strong><a href="{link}">click here</a></strong> '
            f'to verify. Expires in 1 hour.</p>'
        )
    else:
        body = (
            "<p>Hi,</p><p>Welcome to Chilahati Archive! Please verify your account by "
            f'<strong><a href="{link}">clicking here</a></strong>.</p>'
            "<p><strong>Note:</strong> This link will expire in 1 hour.</p>"
            "<p>Best regards,<br>The Chilahati Archive Team</p>"
        )
    return subject, body


def password_reset_email(token: str) -> Tuple[str, str]:
    link = f"{get_base_url()}/reset-password/{token}"
    return (
        "Reset your Chilahati Archive password",
        "<p>Hi,</p><p>You requested a password reset. Please "
        f'<strong><a href="{link}">click here to reset your password</a></strong>.</p>'
        "<p>This link is valid for 1 hour.</p>"
        "<p>Best regards,<br>The Chilahati Archive Team</p>",
    )


def contribution_email(username: str, email: str, message: str) -> Tuple[str, str]:
    who = f"{html.escape(username)} ({html.escape(email)})"
    body = html.escape(message).replace("\n", "<br>")
    return (
        f"Message from {username} ({email})",
        f"<p><strong>Contributor:</strong> {who}</p><p><strong>Message:</strong></p><p>{body}</p>"
        "<hr><p><small>Sent via the Chilahati Archive contribution form.</small></p>",
    )


def contribution_receiver() -> Optional[str]:
    return settings.CONTRIBUTE_RECEIVER_EMAIL or settings.EMAIL_USER

"""
Email delivery over SMTP.

Messages are multipart (plain text plus HTML). ``smtplib`` is blocking, so the
actual conversation with the server runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import html
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

from fauxdash.core.logging_config import get_logger

logger = get_logger(__name__)


class SMTPSettings(BaseModel):
    """Resolved SMTP connection parameters."""

    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    encryption: str = "tls"
    from_email: str = ""
    from_name: str = "Faux|Dash"

    @classmethod
    def from_settings(cls, values: Mapping[str, Any]) -> "SMTPSettings":
        """Build from typed, unmasked global settings (``smtpHost``, ``smtpPort``, ...)."""
        return cls(
            host=values.get("smtpHost") or "",
            port=int(values.get("smtpPort") or 587),
            username=values.get("smtpUsername") or "",
            password=values.get("smtpPassword") or "",
            encryption=(values.get("smtpEncryption") or "tls").lower(),
            from_email=values.get("smtpFromEmail") or "",
            from_name=values.get("smtpFromName") or "Faux|Dash",
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.from_email)


@dataclass
class EmailResult:
    success: bool
    error: Optional[str] = None


def build_email_html(
    title: str,
    body: str,
    button_text: Optional[str] = None,
    button_url: Optional[str] = None,
    site_title: str = "Faux|Dash",
    footer_text: Optional[str] = None,
) -> str:
    """Render the shared email layout.

    Args:
        title: Heading, escaped
        body: Body HTML, inserted as-is
        button_text: Optional call-to-action label
        button_url: Target of the call-to-action
        site_title: Name shown in the header and default footer
        footer_text: Footer line, defaults to "Sent by <site_title>"

    Returns:
        Complete HTML document
    """
    safe_title = html.escape(title)
    safe_site = html.escape(site_title)
    button = ""
    if button_text and button_url:
        button = (
            '<div style="text-align: center; margin: 32px 0;">'
            f'<a href="{html.escape(button_url, quote=True)}" style="display: inline-block; '
            "background-color: #18181b; color: #ffffff; padding: 12px 28px; text-decoration: none; "
            f'border-radius: 6px; font-weight: 600; font-size: 14px;">{html.escape(button_text)}</a>'
            "</div>"
        )
    footer = html.escape(footer_text) if footer_text else f"Sent by {safe_site}"

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{safe_title}</title>
</head>
<body style="margin: 0; padding: 0; background-color: #f4f4f5; font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background-color: #f4f4f5; padding: 40px 20px;">
    <tr>
      <td align="center">
        <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="max-width: 480px;">
          <tr>
            <td style="padding: 0 0 24px 4px;">
              <span style="font-size: 18px; font-weight: 700; color: #18181b;">{safe_site}</span>
            </td>
          </tr>
          <tr>
            <td style="background-color: #ffffff; border-radius: 12px; padding: 36px 32px;">
              <h1 style="margin: 0 0 20px 0; font-size: 20px; font-weight: 600; color: #18181b;">{safe_title}</h1>
              <div style="font-size: 14px; line-height: 1.6; color: #3f3f46;">
                {body}
              </div>
              {button}
            </td>
          </tr>
          <tr>
            <td style="padding: 24px 4px 0 4px; font-size: 12px; color: #a1a1aa; text-align: center;">
              {footer}
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


class EmailSender:
    """Sends messages with the given SMTP settings."""

    def __init__(
        self,
        config: SMTPSettings,
        smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None,
        timeout: float = 30.0,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self._smtp_factory = smtp_factory

    def build_message(self, to: str, subject: str, text: str, html_body: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.config.from_name, self.config.from_email))
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    def _connect(self) -> smtplib.SMTP:
        if self._smtp_factory is not None:
            return self._smtp_factory(self.config.host, self.config.port, timeout=self.timeout)
        if self.config.encryption == "ssl":
            return smtplib.SMTP_SSL(
                self.config.host, self.config.port, timeout=self.timeout, context=ssl.create_default_context()
            )
        return smtplib.SMTP(self.config.host, self.config.port, timeout=self.timeout)

    def _send_sync(self, message: EmailMessage) -> None:
        with self._connect() as client:
            if self.config.encryption == "tls":
                client.starttls(context=ssl.create_default_context())
            if self.config.username:
                client.login(self.config.username, self.config.password)
            client.send_message(message)

    async def send(self, to: str, subject: str, text: str, html_body: Optional[str] = None) -> EmailResult:
        """Send one message.

        Args:
            to: Recipient address
            subject: Subject line
            text: Plain text part
            html_body: Optional HTML alternative

        Returns:
            Result with the SMTP error message on failure
        """
        if not self.config.is_configured:
            return EmailResult(success=False, error="SMTP is not configured")

        message = self.build_message(to, subject, text, html_body)
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}", exc_info=True)
            return EmailResult(success=False, error=str(e) or "Failed to send email")
        logger.info(f"Email sent to {to}: {subject}")
        return EmailResult(success=True)


async def get_email_sender() -> Callable[[SMTPSettings], EmailSender]:
    """Dependency returning the sender factory, overridable in tests."""
    return EmailSender

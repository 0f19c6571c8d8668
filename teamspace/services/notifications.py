"""
Outbound email notifications.

Invitation workflow code only depends on the `NotificationSender` protocol;
the concrete provider is picked from settings.EMAIL_BACKEND.
Senders report delivery as a boolean and never raise.
"""

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Protocol, Tuple

import httpx
from starlette.concurrency import run_in_threadpool

from teamspace.core.config import Settings, settings as default_settings
from teamspace.logging import get_logger

logger = get_logger("notifications")


class NotificationSender(Protocol):
    """Sends one message. Returns True on success, False on any failure."""
    async def send(self, to: str, subject: str, body: str) -> bool: ...


class ConsoleSender:
    """Logs emails instead of sending them (development)."""

    async def send(self, to: str, subject: str, body: str) -> bool:
        logger.info("Simulated email", to=to, subject=subject)
        logger.info(body)
        return True


class SMTPSender:
    def __init__(
        self,
        server: str,
        port: int,
        username: str,
        password: str,
        from_email: str = None,
        from_name: str = None,
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.from_name = from_name

    def _send_sync(self, to: str, subject: str, body: str) -> None:
        msg = MIMEMultipart()
        msg['From'] = f"{self.from_name} <{self.from_email}>" if self.from_name else self.from_email
        msg['To'] = to
        msg['Subject'] = subject
        msg.attach(MIMEText(body, 'html'))

        with smtplib.SMTP(self.server, self.port) as server:
            server.starttls()
            server.login(self.username, self.password)
            server.sendmail(self.from_email, to, msg.as_string())

    async def send(self, to: str, subject: str, body: str) -> bool:
        if not self.username or not self.password:
            logger.error("SMTP credentials not configured", exc_info=False)
            return False
        try:
            await run_in_threadpool(self._send_sync, to, subject, body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}", exc_info=False)
            return False
        return True


class EmailJSSender:
    """Transactional email through the EmailJS REST API."""

    def __init__(
        self,
        api_url: str,
        service_id: str,
        template_id: str,
        public_key: str,
        private_key: str = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.api_url = api_url
        self.service_id = service_id
        self.template_id = template_id
        self.public_key = public_key
        self.private_key = private_key
        self.timeout = timeout
        self.transport = transport

    def is_configured(self) -> bool:
        return bool(self.service_id and self.template_id and self.public_key)

    async def send(self, to: str, subject: str, body: str) -> bool:
        if not self.is_configured():
            logger.warning("EmailJS is not fully configured, email not sent", to=to)
            return False

        data = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.public_key,
            "template_params": {
                "to_email": to,
                "subject": subject,
                "message_html": body,
            },
        }
        if self.private_key:
            data["accessToken"] = self.private_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=data)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error sending email via EmailJS: {e}", exc_info=False)
            return False
        return True


def build_notification_sender(config: Settings = None) -> NotificationSender:
    config = config or default_settings
    if config.EMAIL_BACKEND == "smtp":
        return SMTPSender(
            server=config.SMTP_SERVER,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            from_email=config.SMTP_FROM_EMAIL,
            from_name=config.EMAIL_FROM_NAME,
        )
    if config.EMAIL_BACKEND == "emailjs":
        return EmailJSSender(
            api_url=config.EMAILJS_API_URL,
            service_id=config.EMAILJS_SERVICE_ID,
            template_id=config.EMAILJS_TEMPLATE_ID,
            public_key=config.EMAILJS_PUBLIC_KEY,
            private_key=config.EMAILJS_PRIVATE_KEY,
            timeout=config.EMAIL_TIMEOUT_SECONDS,
        )
    return ConsoleSender()


# ==================== Invitation email ====================

def build_invite_link(token: str, app_url: str = None) -> str:
    base_url = (app_url or default_settings.APP_URL).rstrip("/")
    return f"{base_url}/invitations/{token}"


def render_invitation_email(organization_name: str, invite_link: str) -> Tuple[str, str]:
    """Returns (subject, html body)."""
    subject = f"You're invited to join {organization_name}"
    body = f"""
    <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">
      <h1>You're invited!</h1>
      <p>You've been invited to join <strong>{escape(organization_name)}</strong>.</p>
      <p>Click the link below to accept the invitation and get started:</p>
      <p><a href="{invite_link}">Accept Invitation</a></p>
      <p>If you didn't expect this invitation, you can safely ignore this email.</p>
    </div>
    """
    return subject, body


async def send_invitation_email(
    sender: NotificationSender,
    email: str,
    organization_name: str,
    token: str,
) -> bool:
    subject, body = render_invitation_email(organization_name, build_invite_link(token))
    try:
        sent = await sender.send(email, subject, body)
    except Exception as e:
        # delivery failure never rolls back the stored invitation
        logger.error(f"Notification sender raised: {e}", exc_info=True, email=email)
        return False
    if not sent:
        logger.warning("Invitation email not delivered", email=email)
    return sent

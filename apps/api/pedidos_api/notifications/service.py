"""Approval notification dispatch.

Best-effort by contract: ``notify_approved`` always returns a
``NotificationResult`` and never raises. Transport errors, missing
credentials and template problems are logged and reported as a failed
result so an approval is never undone by its email.
"""

import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from pedidos_api.models import Order
from pedidos_api.settings import Settings
from pedidos_api.utils.metrics import notifications

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of a notification attempt."""

    sent: bool
    reason: Optional[str] = None

    @classmethod
    def succeeded(cls) -> "NotificationResult":
        return cls(sent=True)

    @classmethod
    def failed(cls, reason: str) -> "NotificationResult":
        return cls(sent=False, reason=reason)


class NotificationDispatcher(ABC):
    """Abstract notification dispatcher interface."""

    @abstractmethod
    def notify_approved(self, order: Order) -> NotificationResult:
        """Tell the customer their order was approved. Must not raise."""
        pass


class NullNotificationDispatcher(NotificationDispatcher):
    """Dispatcher used when notifications are disabled."""

    def notify_approved(self, order: Order) -> NotificationResult:
        """Skip sending."""
        logger.debug(f"Notifications disabled, order {order.id} not emailed")
        notifications.labels(status="skipped").inc()
        return NotificationResult.failed("notifications disabled")


class TemplateRenderer:
    """Renders email subjects and bodies from Jinja2 templates."""

    def __init__(self, templates_path: Optional[str] = None):
        """Initialize renderer."""
        self._env = Environment(
            loader=FileSystemLoader(templates_path or str(TEMPLATES_DIR)),
            autoescape=True,
            keep_trailing_newline=False,
        )

    def render(self, name: str, context: dict) -> tuple[str, str]:
        """Render ``(subject, body_html)`` for a template name."""
        subject = self._env.get_template(f"{name}_subject.txt").render(**context).strip()
        body = self._env.get_template(f"{name}_body.html").render(**context)
        return subject, body


class SmtpNotificationDispatcher(NotificationDispatcher):
    """Sends approval emails through an SMTP relay."""

    def __init__(self, settings: Settings, renderer: Optional[TemplateRenderer] = None):
        """Initialize dispatcher from settings."""
        self.settings = settings
        self.renderer = renderer or TemplateRenderer()
        if not settings.smtp_configured:
            logger.warning("GMAIL_USER/GMAIL_PASS not set: approval emails will not be sent")

    def notify_approved(self, order: Order) -> NotificationResult:
        """Send the approval email for an order."""
        if not self.settings.smtp_configured:
            notifications.labels(status="failed").inc()
            return NotificationResult.failed("smtp credentials not configured")

        try:
            subject, body = self.renderer.render(
                "order_approved",
                {"order": order.to_dict()},
            )
            self._send_email(order.email, subject, body)
        except Exception as e:
            logger.warning(f"Email no enviado para pedido {order.id}: {e}", exc_info=True)
            notifications.labels(status="failed").inc()
            return NotificationResult.failed(str(e) or e.__class__.__name__)

        logger.info(f"Approval email sent for order {order.id}")
        notifications.labels(status="sent").inc()
        return NotificationResult.succeeded()

    def _send_email(self, recipient: str, subject: str, body: str) -> None:
        """Send a single HTML email over a per-message SMTP connection."""
        smtp = self.settings
        msg = MIMEMultipart("alternative")
        msg["From"] = smtp.mail_from
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "html", "utf-8"))

        envelope_from = parseaddr(smtp.mail_from)[1] or smtp.gmail_user
        with smtplib.SMTP(smtp.smtp_host, smtp.smtp_port, timeout=smtp.notification_timeout_seconds) as server:
            server.ehlo()
            if smtp.smtp_use_tls:
                server.starttls()
                server.ehlo()
            server.login(smtp.gmail_user, smtp.gmail_pass)
            server.sendmail(envelope_from, [recipient], msg.as_string())


def build_dispatcher(settings: Settings) -> NotificationDispatcher:
    """Pick the dispatcher implementation for the given settings."""
    if not settings.notifications_enabled:
        return NullNotificationDispatcher()
    return SmtpNotificationDispatcher(settings)

"""Confirmation emails sent through the Resend HTTP API.

Delivery is best-effort: one attempt per submission, every failure is logged
and swallowed so it can never change the outcome of the request that
triggered it.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from togetai.config import DEFAULT_EMAIL_FROM
from togetai.exceptions import NotificationError
from togetai.utils.logging import debug_log

logger = logging.getLogger("Togetai.notifier")

RESEND_API_URL = "https://api.resend.com/emails"
TEMPLATE_DIR = Path(__file__).parent / "templates"

PRODUCT_NAME = "Togetai"
WEBSITE_URL = "https://togetai.com"
CONFIRMATION_SUBJECT = "Welcome to Togetai - Thank you for your submission!"

# Per-form messaging; keys match EntrySource values
MESSAGING = {
    "feedback": {
        "headline": "Thank you for your submission! We've received your information and our team will review it shortly.",
        "follow_up": "We're excited about the possibility of working together and will get back to you soon with next steps.",
    },
    "early_access": {
        "headline": "Thank you for requesting early access! You're on the list.",
        "follow_up": "We're onboarding creators in small groups and will email you as soon as your spot opens up.",
    },
}


class Notifier:
    """Renders and sends confirmation emails."""

    def __init__(
        self,
        api_key: Optional[str],
        sender: str = DEFAULT_EMAIL_FROM,
        api_url: str = RESEND_API_URL,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout
        self.templates = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def check_connection(self) -> bool:
        """Report whether delivery is possible at all (API key present)."""
        if self.configured:
            logger.info("Resend API key is set")
        else:
            logger.warning("RESEND_API_KEY is not set, confirmation emails are disabled")
        return self.configured

    def render(self, context: Dict[str, Any]) -> Dict[str, str]:
        """Render subject, HTML and plain-text bodies for a confirmation."""
        source = str(context.get("source") or "feedback")
        values = {
            "product_name": PRODUCT_NAME,
            "website_url": WEBSITE_URL,
            **MESSAGING.get(source, MESSAGING["feedback"]),
            **context,
        }
        try:
            html = self.templates.get_template("email/confirmation.html").render(**values)
            text = self.templates.get_template("email/confirmation.txt").render(**values)
        except TemplateError as e:
            raise NotificationError(f"Could not render confirmation email: {e}") from e
        return {"subject": CONFIRMATION_SUBJECT, "html": html, "text": text}

    async def _deliver(self, to_address: str, context: Dict[str, Any]) -> str:
        if not self.api_key:
            raise NotificationError("RESEND_API_KEY is not set")

        message = self.render(context)
        payload = {"from": self.sender, "to": [to_address], **message}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        debug_log("Sending confirmation email via Resend to %s", to_address)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise NotificationError(f"Resend request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise NotificationError(f"Resend API error: {response.status_code} - {response.text}")

        try:
            return str(response.json().get("id", ""))
        except (ValueError, AttributeError) as e:
            raise NotificationError(f"Malformed Resend response: {e}") from e

    async def send_confirmation(self, to_address: str, context: Dict[str, Any]) -> bool:
        """Send one confirmation email. Never raises; returns whether it was accepted."""
        try:
            message_id = await self._deliver(to_address, context)
        except NotificationError as e:
            logger.warning(f"Confirmation email to {to_address} not sent: {e}")
            return False
        except Exception:
            logger.exception(f"Unexpected error sending confirmation email to {to_address}")
            return False

        logger.info(f"Confirmation email sent to {to_address} (id={message_id})")
        return True

"""Transactional email delivery through the Resend HTTP API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from fusion_edge.exceptions import DependencyError
from fusion_edge.schemas.notification import AgentEmailRequest
from fusion_edge.services.email_templates import render_agent_email

logger = logging.getLogger(__name__)


class EmailDeliveryError(DependencyError):
    """Email provider rejected the message or could not be reached.

    ``retryable`` is set for transport failures and provider 5xx/429 answers.
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class EmailClient:
    """Minimal Resend client."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender: str,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self.transport = transport

    def send(self, to: List[str], subject: str, html: str) -> Dict[str, Any]:
        """
        Send one HTML email.

        Returns:
            Provider response body (contains the message ``id``)

        Raises:
            EmailDeliveryError: On transport failure or non-2xx response
        """
        body = {"from": self.sender, "to": to, "subject": subject, "html": html}
        try:
            with httpx.Client(base_url=self.api_url, timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    "/emails",
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Email provider unreachable: {e}")
            raise EmailDeliveryError(f"Email provider unreachable: {e}", retryable=True)

        if response.is_error:
            try:
                detail = response.json().get("message", response.text)
            except ValueError:
                detail = response.text
            retryable = response.status_code >= 500 or response.status_code == 429
            logger.error(f"Email provider returned {response.status_code}: {detail}")
            raise EmailDeliveryError(f"Email provider error: {detail}", retryable=retryable)

        return response.json()


def send_agent_email(client: EmailClient, email: AgentEmailRequest, currency: str = "TZS") -> Dict[str, Any]:
    """
    Render and send an agent email.

    Raises:
        InvalidEmailTypeError: Unknown template
        EmailDeliveryError: Provider failure
    """
    subject, html = render_agent_email(email, currency=currency)
    logger.info(f"Sending {email.type} email to {email.agent_email}")
    result = client.send([email.agent_email], subject, html)
    logger.info(f"Email sent successfully: {result.get('id')}")
    return result

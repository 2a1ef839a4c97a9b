"""Agent email delivery task."""

import logging

from fusion_edge.celery_app import celery_app
from fusion_edge.config import get_settings
from fusion_edge.schemas.notification import AgentEmailRequest
from fusion_edge.services.email_service import EmailClient, EmailDeliveryError, send_agent_email as deliver

logger = logging.getLogger(__name__)

MAX_RETRIES = 5


def build_email_client() -> EmailClient:
    settings = get_settings()
    return EmailClient(
        api_url=settings.resend_api_url,
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        timeout=settings.email_timeout_seconds,
    )


@celery_app.task(bind=True, name="fusion_edge.tasks.notifications.send_agent_email", max_retries=MAX_RETRIES)
def send_agent_email(self, email_data: dict) -> dict:
    """
    Render and deliver an agent email.

    Transport failures and provider 5xx/429 answers are retried with
    exponential backoff; other provider rejections fail the task.

    Args:
        email_data: AgentEmailRequest as a camelCase dict

    Returns:
        Dict with status and the provider message id
    """
    email = AgentEmailRequest.model_validate(email_data)
    logger.info(f"Delivering {email.type} email to {email.agent_email} (attempt {self.request.retries + 1})")

    try:
        result = deliver(build_email_client(), email, currency=get_settings().currency)
    except EmailDeliveryError as e:
        if e.retryable and self.request.retries < MAX_RETRIES:
            countdown = 2 ** self.request.retries * 30
            logger.warning(f"Email delivery failed, retrying in {countdown}s: {e}")
            raise self.retry(exc=e, countdown=countdown)
        logger.error(f"Email delivery to {email.agent_email} failed permanently: {e}")
        raise

    return {"status": "sent", "id": result.get("id")}

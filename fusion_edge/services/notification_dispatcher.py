"""Hands agent emails to the Celery worker."""

import logging
from typing import Optional

from celery import Celery
from kombu.exceptions import OperationalError

from fusion_edge.schemas.notification import AgentEmailRequest

logger = logging.getLogger(__name__)

SEND_AGENT_EMAIL_TASK = "fusion_edge.tasks.notifications.send_agent_email"


class NotificationDispatcher:
    """Enqueues notification tasks.

    Enqueueing is best effort: a broker outage is logged and the caller's
    request still succeeds.
    """

    def __init__(self, celery_app: Celery):
        self.celery_app = celery_app

    def enqueue_agent_email(self, email: AgentEmailRequest) -> Optional[str]:
        """
        Queue an agent email for delivery.

        Returns:
            Celery task id, or None if the broker refused the message
        """
        try:
            result = self.celery_app.send_task(
                SEND_AGENT_EMAIL_TASK,
                args=[email.model_dump(by_alias=True, exclude_none=True)],
            )
        except OperationalError as e:
            logger.error(f"Failed to enqueue {email.type} email for {email.agent_email}: {e}")
            return None

        logger.info(f"Queued {email.type} email for {email.agent_email}: task {result.id}")
        return result.id

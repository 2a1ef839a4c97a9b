"""Referral agent notification endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fusion_edge.api.deps import get_db, get_email_client, get_notifier, get_settings
from fusion_edge.config import Settings
from fusion_edge.exceptions import FusionError
from fusion_edge.schemas.notification import (
    AgentEmailRequest,
    CodeUsedNotificationRequest,
    FirstOrderNotificationRequest,
    NotificationResult,
    SendEmailResponse,
)
from fusion_edge.services.email_service import EmailClient, send_agent_email
from fusion_edge.services.notification_dispatcher import NotificationDispatcher
from fusion_edge.services.referral_service import notify_code_used, notify_first_order

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/notify-agent-code-used", response_model=NotificationResult, response_model_exclude_none=True)
def notify_agent_code_used(
    request: CodeUsedNotificationRequest,
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Email the agent whose promo code a school just redeemed."""
    try:
        return notify_code_used(db, request, notifier)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"Error in notify-agent-code-used: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/notify-first-order", response_model=NotificationResult, response_model_exclude_none=True)
def notify_agent_first_order(
    request: FirstOrderNotificationRequest,
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
):
    """Credit and email the referring agent when a school places its first order."""
    try:
        return notify_first_order(db, request, notifier, settings.commission_rate)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"Error in notify-first-order: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/send-agent-email", response_model=SendEmailResponse)
def send_agent_email_now(
    request: AgentEmailRequest,
    client: EmailClient = Depends(get_email_client),
    settings: Settings = Depends(get_settings),
):
    """Render and send an agent email synchronously."""
    try:
        result = send_agent_email(client, request, currency=settings.currency)
        return SendEmailResponse(email_response=result)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"Error sending email: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

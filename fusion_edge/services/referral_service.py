"""Referral agent notifications and commission calculation."""

import logging
from typing import Tuple

from sqlalchemy.orm import Session

from fusion_edge.exceptions import FusionError, NotFoundError
from fusion_edge.models.order import Order
from fusion_edge.models.referral import Agent, ReferralCode
from fusion_edge.models.school import School
from fusion_edge.models.staff import Staff
from fusion_edge.schemas.notification import (
    AgentEmailRequest,
    AgentEmailType,
    CodeUsedNotificationRequest,
    FirstOrderNotificationRequest,
    NotificationResult,
)
from fusion_edge.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION_RATE = 0.02
DEFAULT_CREDIT_WORTH_FACTOR = 1.0


class ReferralLookupError(FusionError):
    """Referral data is inconsistent (agent or its staff row missing)."""


def calculate_commission(
    order_amount: float,
    credit_worth_factor: float = DEFAULT_CREDIT_WORTH_FACTOR,
    rate: float = DEFAULT_COMMISSION_RATE,
) -> float:
    """Commission earned on a first order: amount × rate × factor."""
    return order_amount * rate * credit_worth_factor


def get_agent_contact(db: Session, agent_id: str) -> Tuple[Agent, Staff]:
    """
    Get an agent and the staff row holding its email.

    Raises:
        ReferralLookupError: Agent or staff row missing
    """
    agent = db.query(Agent).filter(Agent.id == agent_id).first()
    if not agent:
        logger.error(f"Agent {agent_id} not found")
        raise ReferralLookupError("Agent not found")

    staff = db.query(Staff).filter(Staff.user_id == agent.user_id).first() if agent.user_id else None
    if not staff:
        logger.error(f"Staff record for agent {agent_id} not found")
        raise ReferralLookupError("Staff record not found")
    return agent, staff


def notify_code_used(
    db: Session,
    request: CodeUsedNotificationRequest,
    dispatcher: NotificationDispatcher,
) -> NotificationResult:
    """
    Tell an agent a school signed up with one of their codes.

    Raises:
        NotFoundError: Unknown code id
        ReferralLookupError: Code points at an agent without contact details
    """
    code = db.query(ReferralCode).filter(ReferralCode.id == request.code_id).first()
    if not code:
        logger.error(f"Referral code {request.code_id} not found")
        raise NotFoundError("Code not found")

    _, staff = get_agent_contact(db, code.agent_id)

    task_id = dispatcher.enqueue_agent_email(AgentEmailRequest(
        type=AgentEmailType.CODE_USED,
        agent_email=staff.email,
        agent_name=staff.full_name,
        school_name=request.school_name,
        school_email=request.school_email,
        school_country=request.school_country,
        school_region=request.school_region,
        school_district=request.school_district,
        promo_code=code.code,
    ))

    return NotificationResult(
        message="Agent notification sent",
        agent_email=staff.email,
        school_name=request.school_name,
        task_id=task_id,
    )


def is_first_order(db: Session, school_id: str, order_id: str) -> bool:
    """
    Check whether ``order_id`` is the school's earliest order.

    A school with a single order (or none yet visible) counts as first.
    """
    earliest = (
        db.query(Order.id)
        .filter(Order.created_by_school == school_id)
        .order_by(Order.created_at.asc())
        .limit(2)
        .all()
    )
    return not (len(earliest) > 1 and earliest[0].id != order_id)


def notify_first_order(
    db: Session,
    request: FirstOrderNotificationRequest,
    dispatcher: NotificationDispatcher,
    commission_rate: float = DEFAULT_COMMISSION_RATE,
) -> NotificationResult:
    """
    Credit the referring agent for a school's first order.

    Args:
        db: Database session
        request: Order that was just placed
        dispatcher: Task queue for the email
        commission_rate: Base commission rate

    Returns:
        NotificationResult; skipped orders carry only a message

    Raises:
        ReferralLookupError: Referring agent or its staff row missing
    """
    logger.info(f"Processing first order notification for: {request.school_name}")

    if not is_first_order(db, request.school_id, request.order_id):
        logger.info(f"Order {request.order_id} is not the first order, skipping notification")
        return NotificationResult(message="Not first order, skipped")

    school = db.query(School).filter(School.id == request.school_id).first()
    if not school or not school.referred_by_agent_id:
        logger.info(f"School {request.school_id} was not referred by an agent")
        return NotificationResult(message="No agent referral found")

    code = None
    if school.referral_code_used:
        code = db.query(ReferralCode).filter(ReferralCode.code == school.referral_code_used).first()
    if not code:
        logger.warning(f"Referral code {school.referral_code_used!r} not found, using default factor")
    credit_worth_factor = (code.credit_worth_factor if code else None) or DEFAULT_CREDIT_WORTH_FACTOR

    commission = calculate_commission(request.order_amount, credit_worth_factor, commission_rate)

    _, staff = get_agent_contact(db, school.referred_by_agent_id)

    task_id = dispatcher.enqueue_agent_email(AgentEmailRequest(
        type=AgentEmailType.FIRST_ORDER,
        agent_email=staff.email,
        agent_name=staff.full_name,
        school_name=request.school_name,
        order_amount=request.order_amount,
        commission=commission,
        credit_worth_factor=credit_worth_factor,
    ))

    logger.info(f"Commission {commission} credited for order {request.order_id}")
    return NotificationResult(
        message="First order notification sent",
        commission=commission,
        credit_worth_factor=credit_worth_factor,
        task_id=task_id,
    )

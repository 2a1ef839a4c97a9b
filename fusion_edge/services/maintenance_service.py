"""Periodic maintenance jobs.

Each job takes a session and a reference time so it can run from Celery beat,
from the on-demand endpoint, or from tests with a fixed clock.
"""

import logging
from collections import Counter
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fusion_edge.config import Settings
from fusion_edge.database import utcnow
from fusion_edge.models.activity import AuditEvent, Notification, StaffMetric, StaffTask
from fusion_edge.models.machine import Machine
from fusion_edge.models.order import Order
from fusion_edge.models.staff import Profile, UserRole
from fusion_edge.schemas.session import SessionStatus

logger = logging.getLogger(__name__)

METRIC_ROLES = (UserRole.ADMIN, UserRole.OPERATOR, UserRole.SUPERVISOR)
TASK_COMPLETED = "COMPLETED"


def auto_confirm_orders(db: Session, now: datetime, after_hours: int = 24) -> List[str]:
    """
    Queue PENDING orders nobody confirmed within ``after_hours`` of submission.

    Returns:
        Ids of the orders moved to QUEUED
    """
    cutoff = now - timedelta(hours=after_hours)
    orders = (
        db.query(Order)
        .filter(
            Order.status == SessionStatus.PENDING,
            Order.submission_time < cutoff,
            Order.auto_confirmed_at.is_(None),
        )
        .all()
    )
    if not orders:
        logger.info("No orders to auto-confirm")
        return []

    confirmed = []
    for order in orders:
        order.status = SessionStatus.QUEUED
        order.queued_at = now
        order.auto_confirmed_at = now
        db.add(AuditEvent(
            actor_type="SYSTEM",
            action="ORDER_AUTO_CONFIRMED",
            target_type="ORDER",
            target_id=order.id,
            details={
                "order_id": order.id,
                "total_garments": order.total_garments,
                "auto_confirmed_at": now.isoformat(),
            },
        ))
        confirmed.append(order.id)
    db.commit()

    logger.info(f"Auto-confirmed {len(confirmed)} orders")
    return confirmed


def mark_stale_machines_offline(db: Session, now: datetime, after_minutes: int = 5) -> List[str]:
    """
    Mark online machines that stopped sending heartbeats as offline.

    Returns:
        Device ids marked offline
    """
    cutoff = now - timedelta(minutes=after_minutes)
    machines = (
        db.query(Machine)
        .filter(Machine.is_online.is_(True), Machine.last_seen_at < cutoff)
        .all()
    )
    for machine in machines:
        machine.is_online = False
        machine.is_printing = False
        machine.active_session = None
    db.commit()

    device_ids = [machine.device_id for machine in machines]
    if device_ids:
        logger.info(f"Marked {len(device_ids)} machines as offline: {device_ids}")
    return device_ids


def previous_day_window(now: datetime) -> Tuple[datetime, datetime]:
    """Start and end (inclusive, microsecond precision) of the day before ``now``."""
    yesterday = (now - timedelta(days=1)).date()
    return datetime.combine(yesterday, time.min), datetime.combine(yesterday, time.max)


def summarize_tasks(tasks: List[StaffTask]) -> Dict[str, Any]:
    """Assigned/completed counts, efficiency and mean completion time of tasks."""
    assigned = len(tasks)
    completed = sum(1 for task in tasks if task.status == TASK_COMPLETED)
    durations = [
        (task.completed_at - task.assigned_at).total_seconds()
        for task in tasks
        if task.completed_at
    ]
    return {
        "tasks_assigned": assigned,
        "tasks_completed": completed,
        "efficiency_score": round(completed / assigned, 2) if assigned else None,
        "avg_completion_time_seconds": round(sum(durations) / len(durations)) if durations else None,
    }


def generate_daily_metrics(db: Session, now: datetime) -> int:
    """
    Write yesterday's task metrics for every ADMIN, OPERATOR and SUPERVISOR.

    Does nothing if metrics for that day already exist.

    Returns:
        Number of metric rows written
    """
    start, end = previous_day_window(now)

    existing = db.query(StaffMetric.id).filter(
        StaffMetric.period_start == start,
        StaffMetric.period_end == end,
    ).first()
    if existing:
        logger.info("Metrics already exist for yesterday")
        return 0

    profiles = db.query(Profile).filter(Profile.role.in_(METRIC_ROLES)).all()
    for profile in profiles:
        tasks = (
            db.query(StaffTask)
            .filter(
                StaffTask.staff_user_id == profile.id,
                StaffTask.assigned_at >= start,
                StaffTask.assigned_at <= end,
            )
            .all()
        )
        summary = summarize_tasks(tasks)
        db.add(StaffMetric(staff_user_id=profile.id, period_start=start, period_end=end, **summary))
        logger.info(
            f"Generated metrics for staff {profile.id}: "
            f"{summary['tasks_completed']}/{summary['tasks_assigned']} tasks"
        )
    db.commit()
    return len(profiles)


def cleanup_audit_events(db: Session, now: datetime, retention_days: int = 90) -> int:
    """
    Delete audit events older than the retention window.

    Returns:
        Number of events deleted
    """
    cutoff = now - timedelta(days=retention_days)
    deleted = db.query(AuditEvent).filter(AuditEvent.created_at < cutoff).delete(synchronize_session=False)
    db.commit()
    if deleted:
        logger.info(f"Cleaned up {deleted} old audit events")
    return deleted


def summarize_unread_notifications(db: Session, now: datetime, limit: int = 100) -> Dict[str, int]:
    """
    Count unread, undelivered notifications per target.

    Returns:
        Mapping of target id to unread count
    """
    notifications = (
        db.query(Notification)
        .filter(Notification.is_read.is_(False), Notification.delivered_at.is_(None))
        .order_by(Notification.created_at.asc())
        .limit(limit)
        .all()
    )
    summary = dict(Counter(n.target_id for n in notifications if n.target_id))
    for target_id, count in summary.items():
        logger.info(f"User {target_id} has {count} unread notifications")
    return summary


def build_jobs(settings: Settings) -> List[Tuple[str, Callable[[Session, datetime], Any]]]:
    """Maintenance jobs in run order, bound to configured thresholds."""
    return [
        ("auto_confirm_orders", lambda db, now: auto_confirm_orders(db, now, settings.auto_confirm_after_hours)),
        (
            "update_machine_status",
            lambda db, now: mark_stale_machines_offline(db, now, settings.machine_offline_after_minutes),
        ),
        ("generate_daily_metrics", generate_daily_metrics),
        ("cleanup_audit_events", lambda db, now: cleanup_audit_events(db, now, settings.audit_retention_days)),
        (
            "send_notification_summaries",
            lambda db, now: summarize_unread_notifications(db, now, settings.notification_summary_limit),
        ),
    ]


def run_job(db: Session, name: str, job: Callable[[Session, datetime], Any], now: datetime) -> Dict[str, Any]:
    """Run one job; a database failure is logged and reported, not raised."""
    logger.info(f"Running {name} job...")
    try:
        return {"ok": True, "result": job(db, now)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{name} job failed: {e}")
        return {"ok": False, "error": str(e)}


def run_all(db: Session, settings: Settings, now: Optional[datetime] = None) -> Dict[str, Dict[str, Any]]:
    """
    Run every maintenance job in order.

    Returns:
        Per-job outcome keyed by job name
    """
    now = now or utcnow()
    logger.info("Running background jobs...")
    results = {name: run_job(db, name, job, now) for name, job in build_jobs(settings)}
    logger.info("Background jobs completed")
    return results

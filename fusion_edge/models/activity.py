"""Audit, task, metric and notification models used by maintenance jobs."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text

from fusion_edge.database import Base, new_id, utcnow


class AuditEvent(Base):
    """Audit trail entry."""

    __tablename__ = "audit_events"

    id = Column(String(36), primary_key=True, default=new_id)
    actor_type = Column(String(20), nullable=False)  # USER or SYSTEM
    actor_id = Column(String(36), nullable=True)
    action = Column(String(100), nullable=False)
    target_type = Column(String(50), nullable=True)
    target_id = Column(String(36), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class StaffTask(Base):
    """Task assigned to a staff user."""

    __tablename__ = "staff_tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_user_id = Column(String(36), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="PENDING")
    target_id = Column(String(36), nullable=True)
    assigned_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class StaffMetric(Base):
    """Per-period task metrics for a staff user."""

    __tablename__ = "staff_metrics"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_user_id = Column(String(36), nullable=False, index=True)
    period_start = Column(DateTime, nullable=False, index=True)
    period_end = Column(DateTime, nullable=False)
    tasks_assigned = Column(Integer, nullable=False, default=0)
    tasks_completed = Column(Integer, nullable=False, default=0)
    efficiency_score = Column(Float, nullable=True)
    avg_completion_time_seconds = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Notification(Base):
    """In-app notification addressed to a user."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    target_id = Column(String(36), nullable=True, index=True)
    target_type = Column(String(50), nullable=True)
    level = Column(String(10), nullable=False, default="INFO")
    channel = Column(String(10), nullable=False, default="IN_APP")
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    delivered_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

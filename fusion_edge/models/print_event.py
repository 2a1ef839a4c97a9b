"""Print event model."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String

from fusion_edge.database import Base, new_id, utcnow


class PrintEvent(Base):
    """Immutable print lifecycle event reported by a machine.

    ``order_item_id``, ``garment_type`` and ``garment_count`` are copied out of
    ``payload`` at insert time so printed totals can be summed from the log.
    """

    __tablename__ = "print_events"

    id = Column(String(36), primary_key=True, default=new_id)
    print_job_id = Column(String(255), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    # Type: START, PROGRESS, COMPLETE, ERROR, CANCEL
    payload = Column(JSON, nullable=False, default=dict)
    idempotency_key = Column(String(255), nullable=False, unique=True, index=True)
    machine_id = Column(String(36), ForeignKey("machines.id", ondelete="SET NULL"), nullable=True, index=True)
    order_item_id = Column(String(36), nullable=True, index=True)
    garment_type = Column(String(10), nullable=True)  # DARK or LIGHT
    garment_count = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<PrintEvent(id={self.id}, job={self.print_job_id}, type={self.type})>"

"""Order (printing session) models."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from fusion_edge.database import Base, new_id, utcnow


class Order(Base):
    """Printing session ordered by a school.

    The operator app calls this a "session"; ``external_ref`` is the service
    passcode an operator types in to start it.
    """

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    created_by_school = Column(String(36), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    external_ref = Column(String(100), nullable=True, unique=True, index=True)
    status = Column(String(30), nullable=False, default="UNSUBMITTED", index=True)
    # Status: UNSUBMITTED, PENDING, CONFIRMED, QUEUED, IN_PROGRESS, COMPLETED, DELIVERED
    school_name = Column(String(255), nullable=True)
    total_amount = Column(Float, nullable=True)
    total_garments = Column(Integer, nullable=False, default=0)
    total_students = Column(Integer, nullable=False, default=0)
    total_classes_to_serve = Column(Integer, nullable=False, default=0)
    total_classes_served = Column(Integer, nullable=False, default=0)
    total_students_served_in_school = Column(Integer, nullable=False, default=0)
    is_session_active = Column(Boolean, nullable=False, default=False)
    is_served = Column(Boolean, nullable=False, default=False)
    hosted_by = Column(String(100), nullable=True)
    assigned_operator_id = Column(String(36), nullable=True)
    current_class_name = Column(String(255), nullable=True)
    current_student_name = Column(String(255), nullable=True)
    device_used_mac = Column(String(100), nullable=True)
    scheduled_date = Column(DateTime, nullable=True)
    submission_time = Column(DateTime, nullable=True)
    queued_at = Column(DateTime, nullable=True)
    auto_confirmed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    school = relationship("School", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    classes = relationship("SchoolClass", back_populates="session", order_by="SchoolClass.name")

    def __repr__(self):
        return f"<Order(id={self.id}, status={self.status}, school={self.created_by_school})>"


class OrderItem(Base):
    """Garments to print for one student within an order."""

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String(36), nullable=True, index=True)
    student_name_cached = Column(String(255), nullable=False, default="")
    dark_count = Column(Integer, nullable=False, default=0)
    light_count = Column(Integer, nullable=False, default=0)
    printed_dark = Column(Integer, nullable=False, default=0)
    printed_light = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="PENDING")
    # Status: PENDING, IN_PROGRESS, COMPLETED
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    order = relationship("Order", back_populates="items")

    @property
    def total_required(self) -> int:
        return (self.dark_count or 0) + (self.light_count or 0)

    @property
    def total_printed(self) -> int:
        return (self.printed_dark or 0) + (self.printed_light or 0)

    def __repr__(self):
        return f"<OrderItem(id={self.id}, status={self.status}, order_id={self.order_id})>"

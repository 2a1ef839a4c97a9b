"""Machine models."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from fusion_edge.database import Base, new_id, utcnow


class Machine(Base):
    """Printing device registered with the platform."""

    __tablename__ = "machines"

    id = Column(String(36), primary_key=True, default=new_id)
    device_id = Column(String(255), nullable=False, unique=True, index=True)
    secret_key = Column(String(255), nullable=False)
    is_online = Column(Boolean, nullable=False, default=False)
    is_printing = Column(Boolean, nullable=False, default=False)
    firmware_version = Column(String(100), nullable=True)
    model = Column(String(255), nullable=True)
    up_time = Column(String(100), nullable=True)
    sessions_held = Column(Integer, nullable=False, default=0)
    active_session = Column(String(255), nullable=True)  # print_job_id while printing
    last_seen_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    locations = relationship(
        "MachineLocation",
        back_populates="machine",
        cascade="all, delete-orphan",
        order_by="MachineLocation.created_at",
    )

    def __repr__(self):
        return f"<Machine(id={self.id}, device_id={self.device_id}, online={self.is_online})>"


class MachineLocation(Base):
    """Append-only location sample reported by a machine heartbeat."""

    __tablename__ = "machine_locations"

    id = Column(String(36), primary_key=True, default=new_id)
    machine_id = Column(String(36), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    provider = Column(String(50), nullable=True, default="device")
    created_at = Column(DateTime, default=utcnow, nullable=False)

    machine = relationship("Machine", back_populates="locations")

    def __repr__(self):
        return f"<MachineLocation(machine_id={self.machine_id}, lat={self.lat}, lng={self.lng})>"

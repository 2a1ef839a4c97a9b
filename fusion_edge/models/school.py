"""School, class and student models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from fusion_edge.database import Base, new_id, utcnow


class School(Base):
    """Customer school."""

    __tablename__ = "schools"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    headmaster_name = Column(String(255), nullable=True)
    country = Column(String(100), nullable=True)
    region = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    service_pass_code = Column(String(100), nullable=True)
    referral_code_used = Column(String(50), nullable=True)
    referred_by_agent_id = Column(String(36), ForeignKey("agents.id", ondelete="SET NULL"), nullable=True, index=True)
    referred_at = Column(DateTime, nullable=True)
    user_id = Column(String(36), nullable=True)
    total_student_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    orders = relationship("Order", back_populates="school", cascade="all, delete-orphan")
    referred_by_agent = relationship("Agent")

    def __repr__(self):
        return f"<School(id={self.id}, name={self.name})>"


class SchoolClass(Base):
    """Class of students served within a session."""

    __tablename__ = "classes"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    school_id = Column(String(36), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String(36), ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    is_attended = Column(Boolean, nullable=False, default=False)
    is_audited = Column(Boolean, nullable=False, default=False)
    total_students_to_serve_in_class = Column(Integer, nullable=False, default=0)
    total_students_served_in_class = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    session = relationship("Order", back_populates="classes")
    students = relationship("Student", back_populates="school_class", order_by="Student.full_name")

    def __repr__(self):
        return f"<SchoolClass(id={self.id}, name={self.name})>"


class Student(Base):
    """Student whose garments are printed during a session."""

    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=new_id)
    full_name = Column(String(255), nullable=False)
    class_id = Column(String(36), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    school_id = Column(String(36), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String(36), nullable=True, index=True)
    total_dark_garment_count = Column(Integer, nullable=False, default=0)
    total_light_garment_count = Column(Integer, nullable=False, default=0)
    printed_dark_garment_count = Column(Integer, nullable=False, default=0)
    printed_light_garment_count = Column(Integer, nullable=False, default=0)
    dark_garments_printed = Column(Boolean, nullable=False, default=False)
    light_garments_printed = Column(Boolean, nullable=False, default=False)
    is_served = Column(Boolean, nullable=False, default=False)
    printing_done_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    school_class = relationship("SchoolClass", back_populates="students")

    def __repr__(self):
        return f"<Student(id={self.id}, name={self.full_name})>"

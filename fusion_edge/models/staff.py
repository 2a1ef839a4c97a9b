"""Staff, profile and role models."""

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from fusion_edge.database import Base, new_id, utcnow


class UserRole:
    """Platform roles."""

    ADMIN = "ADMIN"
    OPERATOR = "OPERATOR"
    AUDITOR = "AUDITOR"
    SUPERVISOR = "SUPERVISOR"
    AGENT = "AGENT"
    SCHOOL_USER = "SCHOOL_USER"

    ALL = (ADMIN, OPERATOR, AUDITOR, SUPERVISOR, AGENT, SCHOOL_USER)


class Profile(Base):
    """Profile row keyed by the auth provider's user id."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    full_name = Column(String(255), nullable=False, default="")
    role = Column(String(20), nullable=False, default=UserRole.SCHOOL_USER)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Profile(id={self.id}, role={self.role})>"


class Staff(Base):
    """Staff member (operator, auditor, supervisor or agent)."""

    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_id = Column(String(20), nullable=False, unique=True, index=True)
    user_id = Column(String(36), nullable=True, index=True)
    email = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False)
    sessions_hosted = Column(Integer, nullable=False, default=0)
    created_by_admin = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Staff(staff_id={self.staff_id}, role={self.role})>"


class UserRoleAssignment(Base):
    """Role granted to an auth user."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=True)

    def __repr__(self):
        return f"<UserRoleAssignment(user_id={self.user_id}, role={self.role})>"

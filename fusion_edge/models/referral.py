"""Referral agent models."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from fusion_edge.database import Base, new_id, utcnow


class Agent(Base):
    """Referral agent; contact details live on the staff row sharing ``user_id``."""

    __tablename__ = "agents"

    id = Column(String(36), primary_key=True, default=new_id)
    business_name = Column(String(255), nullable=False)
    country = Column(String(100), nullable=True)
    region = Column(String(100), nullable=True)
    user_id = Column(String(36), nullable=True, index=True)
    total_schools_referred = Column(Integer, nullable=False, default=0)
    total_credits = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    codes = relationship("ReferralCode", back_populates="agent", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Agent(id={self.id}, business_name={self.business_name})>"


class ReferralCode(Base):
    """Invitational promo code handed out by an agent.

    ``credit_worth_factor`` is frozen when the code is redeemed and is the
    multiplier applied to the first-order commission.
    """

    __tablename__ = "agent_invitational_codes"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(50), nullable=False, unique=True, index=True)
    agent_id = Column(String(36), ForeignKey("agents.id", ondelete="CASCADE"), nullable=False, index=True)
    credit_worth_factor = Column(Float, nullable=False, default=1.0)
    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime, nullable=True)
    used_by_school_id = Column(String(36), nullable=True)
    school_name = Column(String(255), nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    agent = relationship("Agent", back_populates="codes")

    def __repr__(self):
        return f"<ReferralCode(code={self.code}, factor={self.credit_worth_factor})>"

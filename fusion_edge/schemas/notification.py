"""Referral notification schemas.

Request bodies use the camelCase keys the web app sends.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AgentEmailType:
    """Agent email templates."""

    CODE_USED = "code_used"
    FIRST_ORDER = "first_order"

    ALL = (CODE_USED, FIRST_ORDER)


class CodeUsedNotificationRequest(BaseModel):
    """A school signed up with an agent's promo code."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    code_id: str = Field(..., alias="codeId", min_length=1)
    school_name: str = Field(..., alias="schoolName")
    school_email: Optional[str] = Field(None, alias="schoolEmail")
    school_country: Optional[str] = Field(None, alias="schoolCountry")
    school_region: Optional[str] = Field(None, alias="schoolRegion")
    school_district: Optional[str] = Field(None, alias="schoolDistrict")


class FirstOrderNotificationRequest(BaseModel):
    """A school placed an order that may be its first."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    order_id: str = Field(..., alias="orderId", min_length=1)
    school_id: str = Field(..., alias="schoolId", min_length=1)
    school_name: str = Field(..., alias="schoolName")
    order_amount: float = Field(..., alias="orderAmount", ge=0)


class AgentEmailRequest(BaseModel):
    """Template context for an agent email.

    ``type`` is checked by the renderer, not here, so an unknown template
    surfaces as a delivery failure.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: str
    agent_email: str = Field(..., alias="agentEmail", min_length=3)
    agent_name: str = Field(..., alias="agentName")
    school_name: str = Field(..., alias="schoolName")
    school_email: Optional[str] = Field(None, alias="schoolEmail")
    school_country: Optional[str] = Field(None, alias="schoolCountry")
    school_region: Optional[str] = Field(None, alias="schoolRegion")
    school_district: Optional[str] = Field(None, alias="schoolDistrict")
    promo_code: Optional[str] = Field(None, alias="promoCode")
    order_amount: Optional[float] = Field(None, alias="orderAmount")
    commission: Optional[float] = None
    credit_worth_factor: Optional[float] = Field(None, alias="creditWorthFactor")


class NotificationResult(BaseModel):
    """Outcome of a notification trigger."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    agent_email: Optional[str] = Field(None, alias="agentEmail")
    school_name: Optional[str] = Field(None, alias="schoolName")
    commission: Optional[float] = None
    credit_worth_factor: Optional[float] = Field(None, alias="creditWorthFactor")
    task_id: Optional[str] = Field(None, alias="taskId")


class SendEmailResponse(BaseModel):
    """Provider response for a sent email."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    email_response: Dict[str, Any] = Field(..., alias="emailResponse")

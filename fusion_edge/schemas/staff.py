"""Staff provisioning schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from fusion_edge.models.staff import UserRole


class StaffCreateRequest(BaseModel):
    """Admin request to provision a staff member."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    email: EmailStr
    full_name: str = Field(..., alias="fullName", min_length=1)
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    role: str
    staff_id: str = Field(..., alias="staffId", min_length=1, max_length=20)

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: str) -> str:
        if value not in UserRole.ALL:
            raise ValueError(f"role must be one of: {', '.join(UserRole.ALL)}")
        return value


class StaffCreateResponse(BaseModel):
    """Provisioned staff identifiers."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user_id: str = Field(..., alias="userId")
    staff_id: str = Field(..., alias="staffId")

"""Session (order), class, student and operator schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class SessionStatus:
    """Session status values."""

    UNSUBMITTED = "UNSUBMITTED"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    QUEUED = "QUEUED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DELIVERED = "DELIVERED"

    ALL = (UNSUBMITTED, PENDING, CONFIRMED, QUEUED, IN_PROGRESS, COMPLETED, DELIVERED)


# Requests
class InitSessionRequest(BaseModel):
    """Operator starting a session with the school's passcode."""

    model_config = ConfigDict(extra="forbid")

    operator_id: str = Field(..., min_length=1)
    service_passcode: str = Field(..., min_length=1)


class RecordLookupRequest(BaseModel):
    """Fetch a single row by id."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)


class ClassStudentsRequest(BaseModel):
    """List the students of a class."""

    model_config = ConfigDict(extra="forbid")

    class_id: str = Field(..., min_length=1)


class SessionUpdateRequest(BaseModel):
    """Partial session update. ``status`` is checked against SessionStatus.ALL."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    status: Optional[str] = None
    is_session_active: Optional[StrictBool] = None
    is_served: Optional[StrictBool] = None
    hosted_by: Optional[str] = None
    assigned_operator_id: Optional[str] = None
    current_class_name: Optional[str] = None
    current_student_name: Optional[str] = None
    device_used_mac: Optional[str] = None
    total_classes_served: Optional[int] = Field(None, ge=0)
    total_students_served_in_school: Optional[int] = Field(None, ge=0)
    scheduled_date: Optional[datetime] = None


class ClassUpdateRequest(BaseModel):
    """Partial class update."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    total_students_served_in_class: Optional[int] = Field(None, ge=0)
    is_attended: Optional[StrictBool] = None


class StudentUpdateRequest(BaseModel):
    """Partial student update."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    printed_dark_garment_count: Optional[int] = Field(None, ge=0)
    printed_light_garment_count: Optional[int] = Field(None, ge=0)
    dark_garments_printed: Optional[StrictBool] = None
    light_garments_printed: Optional[StrictBool] = None
    is_served: Optional[StrictBool] = None


class OperatorRecordRequest(BaseModel):
    """Operator finished hosting a session."""

    model_config = ConfigDict(extra="forbid")

    operator_id: str = Field(..., min_length=1)
    operator_hosted_session_to_completion: Optional[StrictBool] = None


# Responses
class StaffResponse(BaseModel):
    """Staff row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    staff_id: str
    user_id: Optional[str]
    email: str
    full_name: str
    phone_number: Optional[str]
    role: str
    sessions_hosted: int
    created_at: datetime


class SchoolResponse(BaseModel):
    """School row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: Optional[str]
    headmaster_name: Optional[str]
    country: Optional[str]
    region: Optional[str]
    district: Optional[str]
    total_student_count: int
    created_at: datetime


class SessionResponse(BaseModel):
    """Session (order) row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_by_school: str
    external_ref: Optional[str]
    status: str
    school_name: Optional[str]
    total_amount: Optional[float]
    total_garments: int
    total_students: int
    total_classes_to_serve: int
    total_classes_served: int
    total_students_served_in_school: int
    is_session_active: bool
    is_served: bool
    hosted_by: Optional[str]
    assigned_operator_id: Optional[str]
    current_class_name: Optional[str]
    current_student_name: Optional[str]
    device_used_mac: Optional[str]
    scheduled_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class ClassResponse(BaseModel):
    """Class row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    school_id: str
    session_id: Optional[str]
    is_attended: bool
    total_students_to_serve_in_class: int
    total_students_served_in_class: int
    updated_at: datetime


class StudentResponse(BaseModel):
    """Student row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    class_id: str
    school_id: str
    session_id: Optional[str]
    total_dark_garment_count: int
    total_light_garment_count: int
    printed_dark_garment_count: int
    printed_light_garment_count: int
    dark_garments_printed: bool
    light_garments_printed: bool
    is_served: bool
    updated_at: datetime


class InitSessionResponse(BaseModel):
    """Everything the operator app needs to start serving a session."""

    message: str
    operator: StaffResponse
    session: SessionResponse
    school: Optional[SchoolResponse]
    classes: List[ClassResponse]


class StudentResult(BaseModel):
    message: str
    student: StudentResponse


class ClassStudentsResponse(BaseModel):
    message: str
    class_id: str
    students: List[StudentResponse]


class ClassResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    class_: ClassResponse = Field(..., alias="class")


class SessionResult(BaseModel):
    message: str
    session: SessionResponse


class OperatorResult(BaseModel):
    message: str
    operator: Optional[StaffResponse] = None

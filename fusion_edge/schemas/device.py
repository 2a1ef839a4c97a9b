"""Device heartbeat and print event schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PrintEventType:
    """Print event types."""

    START = "START"
    PROGRESS = "PROGRESS"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"
    CANCEL = "CANCEL"

    ALL = (START, PROGRESS, COMPLETE, ERROR, CANCEL)
    TERMINAL = (COMPLETE, ERROR, CANCEL)


class GarmentType:
    """Garment colour classes."""

    DARK = "DARK"
    LIGHT = "LIGHT"


class HeartbeatLocation(BaseModel):
    """Location fix reported with a heartbeat."""

    model_config = ConfigDict(extra="forbid")

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    provider: Optional[str] = None


class HeartbeatPayload(BaseModel):
    """Heartbeat body. Only ``is_online`` is required; absent fields are left untouched."""

    model_config = ConfigDict(extra="forbid")

    device_id: Optional[str] = None
    is_online: bool
    is_printing: Optional[bool] = None
    firmware_version: Optional[str] = None
    model: Optional[str] = None
    up_time: Optional[str] = None
    sessions_held: Optional[int] = Field(None, ge=0)
    active_session: Optional[str] = None
    location: Optional[HeartbeatLocation] = None


class HeartbeatResponse(BaseModel):
    """Heartbeat acknowledgement."""

    success: bool = True
    timestamp: str
    device_id: str


class PrintEventDetails(BaseModel):
    """Event-specific data carried in ``payload``."""

    model_config = ConfigDict(extra="forbid")

    student_id: Optional[str] = None
    student_name: Optional[str] = None
    garment_type: Optional[str] = Field(None, pattern="^(DARK|LIGHT)$")
    garment_count: Optional[int] = Field(None, ge=0)
    progress_percentage: Optional[float] = Field(None, ge=0, le=100)
    error_message: Optional[str] = None
    order_id: Optional[str] = None
    order_item_id: Optional[str] = None
    timestamp: Optional[str] = None


class PrintEventPayload(BaseModel):
    """Print event body."""

    model_config = ConfigDict(extra="forbid")

    print_job_id: str = Field(..., min_length=1)
    type: str = Field(..., pattern="^(START|PROGRESS|COMPLETE|ERROR|CANCEL)$")
    payload: PrintEventDetails
    idempotency_key: Optional[str] = Field(None, min_length=1, max_length=255)

    @property
    def carries_garment_count(self) -> bool:
        """True for COMPLETE events that report printed garments for an order item."""
        return (
            self.type == PrintEventType.COMPLETE
            and bool(self.payload.order_item_id)
            and self.payload.garment_type is not None
            and bool(self.payload.garment_count)
        )


class PrintEventResponse(BaseModel):
    """Print event acknowledgement; ``message`` is set for replays."""

    success: bool = True
    event_id: str
    timestamp: Optional[str] = None
    message: Optional[str] = None

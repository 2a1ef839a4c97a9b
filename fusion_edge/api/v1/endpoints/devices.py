"""Device endpoints: heartbeats and print events.

Both verify an HMAC over the raw body, so they read the body themselves
instead of letting FastAPI parse it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from fusion_edge.api.deps import get_db, get_raw_body, get_settings, parse_json_body, validate_body
from fusion_edge.config import Settings
from fusion_edge.database import utcnow
from fusion_edge.exceptions import ClientInputError, FusionError
from fusion_edge.schemas.device import (
    HeartbeatPayload,
    HeartbeatResponse,
    PrintEventPayload,
    PrintEventResponse,
)
from fusion_edge.services.device_service import apply_heartbeat, authenticate_device
from fusion_edge.services.print_event_service import ingest_print_event

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_EVENT_FIELDS = ("print_job_id", "type", "payload")


def _require_device_id(x_device_id: Optional[str]) -> str:
    if not x_device_id:
        raise ClientInputError("Device ID header required")
    return x_device_id


def _timestamp() -> str:
    return utcnow().isoformat() + "Z"


@router.post("/device-heartbeat", response_model=HeartbeatResponse)
def device_heartbeat(
    raw_body: bytes = Depends(get_raw_body),
    x_device_id: Optional[str] = Header(None),
    x_device_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Record a machine heartbeat.

    - **x-device-id**: registered device identifier (header)
    - **x-device-signature**: hex HMAC-SHA256 of the body (header, optional)
    - **is_online**: required; other machine fields are merged when present
    """
    try:
        device_id = _require_device_id(x_device_id)
        data = parse_json_body(raw_body)
        logger.info(f"Heartbeat received from device: {device_id}")

        machine = authenticate_device(
            db, device_id, raw_body, x_device_signature, settings.require_device_signature
        )
        payload = validate_body(HeartbeatPayload, data)
        apply_heartbeat(db, machine, payload)

        return HeartbeatResponse(timestamp=_timestamp(), device_id=device_id)

    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"Error processing heartbeat: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.post("/device-print-events", response_model=PrintEventResponse, response_model_exclude_none=True)
def device_print_events(
    raw_body: bytes = Depends(get_raw_body),
    x_device_id: Optional[str] = Header(None),
    x_device_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Ingest a print event exactly once.

    A replayed idempotency key returns the stored event id without applying
    any side effect again.
    """
    try:
        device_id = _require_device_id(x_device_id)
        data = parse_json_body(raw_body)

        if not isinstance(data, dict) or any(data.get(field) is None for field in REQUIRED_EVENT_FIELDS):
            raise ClientInputError(f"Missing required fields: {', '.join(REQUIRED_EVENT_FIELDS)}")

        logger.info(f"Print event received from device {device_id}: {data.get('type')}")

        machine = authenticate_device(
            db, device_id, raw_body, x_device_signature, settings.require_device_signature
        )
        event = validate_body(PrintEventPayload, data)
        result = ingest_print_event(db, machine, device_id, event)

        if result.duplicate:
            return PrintEventResponse(event_id=result.event_id, message="Event already processed")
        return PrintEventResponse(event_id=result.event_id, timestamp=_timestamp())

    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"Error processing print event: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

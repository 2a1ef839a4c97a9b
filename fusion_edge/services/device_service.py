"""Device registry and heartbeat business logic."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fusion_edge.database import utcnow
from fusion_edge.exceptions import AuthError, DependencyError, NotFoundError
from fusion_edge.models.machine import Machine, MachineLocation
from fusion_edge.schemas.device import HeartbeatLocation, HeartbeatPayload
from fusion_edge.services.signature import verify_signature

logger = logging.getLogger(__name__)

# Heartbeat string fields where an empty value means "not reported"
_METADATA_FIELDS = ("firmware_version", "model", "up_time")
# Heartbeat fields applied whenever present, including explicit nulls
_STATE_FIELDS = ("is_printing", "sessions_held", "active_session")


class DeviceNotRegisteredError(NotFoundError):
    """No machine row for the device id."""

    def __init__(self, device_id: str):
        super().__init__("Device not registered", details={"device_id": device_id})


class InvalidSignatureError(AuthError):
    """Device signature missing or wrong."""


def get_machine_by_device_id(db: Session, device_id: str) -> Machine:
    """
    Look up a registered machine.

    Args:
        db: Database session
        device_id: Device identifier from the ``x-device-id`` header

    Returns:
        Machine instance

    Raises:
        DeviceNotRegisteredError: If no machine has this device id
    """
    machine = db.query(Machine).filter(Machine.device_id == device_id).first()
    if not machine:
        logger.error(f"Machine not found: {device_id}")
        raise DeviceNotRegisteredError(device_id)
    return machine


def authenticate_device(
    db: Session,
    device_id: str,
    raw_body: bytes,
    signature: Optional[str],
    require_signature: bool = False,
) -> Machine:
    """
    Resolve the device and check its signature.

    A request without a signature is accepted unless ``require_signature`` is
    set.

    Raises:
        DeviceNotRegisteredError: Unknown device
        InvalidSignatureError: Signature missing (when required) or wrong
    """
    machine = get_machine_by_device_id(db, device_id)

    if not signature:
        if require_signature:
            logger.warning(f"Unsigned request rejected for device: {device_id}")
            raise InvalidSignatureError("Signature required")
        return machine

    if not verify_signature(raw_body, signature, machine.secret_key):
        logger.error(f"Invalid signature for device: {device_id}")
        raise InvalidSignatureError("Invalid signature")

    return machine


def build_heartbeat_update(payload: HeartbeatPayload, now: datetime) -> dict:
    """Collect the machine columns a heartbeat sets.

    Fields the device did not send are left out so stored values survive.
    """
    sent = payload.model_dump(exclude_unset=True)
    update = {"is_online": payload.is_online, "last_seen_at": now}

    for field in _METADATA_FIELDS:
        if sent.get(field):
            update[field] = sent[field]

    for field in _STATE_FIELDS:
        if field not in sent:
            continue
        if field == "active_session" or sent[field] is not None:
            update[field] = sent[field]

    return update


def record_location(db: Session, machine: Machine, location: HeartbeatLocation) -> Optional[MachineLocation]:
    """Append a location sample. Failures are logged and return None."""
    sample = MachineLocation(
        machine_id=machine.id,
        lat=location.lat,
        lng=location.lng,
        provider=location.provider or "device",
    )
    try:
        db.add(sample)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store location for {machine.device_id}: {e}")
        return None
    return sample


def apply_heartbeat(
    db: Session,
    machine: Machine,
    payload: HeartbeatPayload,
    now: Optional[datetime] = None,
) -> Machine:
    """
    Merge a heartbeat into the machine row.

    Args:
        db: Database session
        machine: Authenticated machine
        payload: Validated heartbeat body
        now: Timestamp to stamp as ``last_seen_at`` (defaults to current UTC)

    Returns:
        Updated machine

    Raises:
        DependencyError: If the machine row cannot be updated
    """
    now = now or utcnow()
    update = build_heartbeat_update(payload, now)

    try:
        for field, value in update.items():
            setattr(machine, field, value)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update machine {machine.device_id}: {e}")
        raise DependencyError("Failed to update machine status")

    if payload.location is not None:
        record_location(db, machine, payload.location)

    logger.info(f"Heartbeat processed successfully for device: {machine.device_id}")
    return machine

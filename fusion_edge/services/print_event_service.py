"""Print event ingestion: idempotency, order item reconciliation, machine state."""

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fusion_edge.exceptions import DependencyError
from fusion_edge.models.machine import Machine
from fusion_edge.models.order import OrderItem
from fusion_edge.models.print_event import PrintEvent
from fusion_edge.schemas.device import GarmentType, PrintEventPayload, PrintEventType

logger = logging.getLogger(__name__)


class OrderItemStatus:
    """Order item status values."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


@dataclass
class IngestResult:
    """Outcome of ingesting one print event."""

    event_id: str
    duplicate: bool = False


def build_idempotency_key(device_id: str, event: PrintEventPayload) -> str:
    """
    Return the caller's idempotency key, or derive one from the event.

    The derived key hashes the event content, so a device re-sending the same
    body gets the same key while two PROGRESS reports with different data do
    not collide.
    """
    if event.idempotency_key:
        return event.idempotency_key

    canonical = json.dumps(
        {
            "device_id": device_id,
            "print_job_id": event.print_job_id,
            "type": event.type,
            "payload": event.payload.model_dump(exclude_none=True),
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]
    return f"{device_id}-{event.print_job_id}-{event.type}-{digest}"


def find_event_by_key(db: Session, idempotency_key: str) -> Optional[PrintEvent]:
    """Get a stored event by idempotency key."""
    return db.query(PrintEvent).filter(PrintEvent.idempotency_key == idempotency_key).first()


def store_print_event(
    db: Session,
    machine: Machine,
    event: PrintEventPayload,
    idempotency_key: str,
) -> IngestResult:
    """
    Insert the event unless its key is already stored.

    A concurrent insert of the same key loses on the unique index and is
    reported as a duplicate of the winner.

    Raises:
        DependencyError: If the insert fails for any other reason
    """
    existing = find_event_by_key(db, idempotency_key)
    if existing:
        logger.info(f"Duplicate event detected, ignoring: {idempotency_key}")
        return IngestResult(event_id=existing.id, duplicate=True)

    details = event.payload
    print_event = PrintEvent(
        print_job_id=event.print_job_id,
        type=event.type,
        payload=details.model_dump(exclude_none=True),
        idempotency_key=idempotency_key,
        machine_id=machine.id,
        order_item_id=details.order_item_id,
        garment_type=details.garment_type,
        garment_count=details.garment_count,
    )

    try:
        db.add(print_event)
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_event_by_key(db, idempotency_key)
        if existing:
            logger.info(f"Duplicate event won by concurrent request: {idempotency_key}")
            return IngestResult(event_id=existing.id, duplicate=True)
        logger.error(f"Failed to store print event {idempotency_key}", exc_info=True)
        raise DependencyError("Failed to store print event")
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to store print event {idempotency_key}", exc_info=True)
        raise DependencyError("Failed to store print event")

    return IngestResult(event_id=print_event.id)


def printed_totals(db: Session, order_item_id: str) -> dict:
    """Sum garment counts of COMPLETE events in the log, per garment type."""
    rows = (
        db.query(PrintEvent.garment_type, func.coalesce(func.sum(PrintEvent.garment_count), 0))
        .filter(
            PrintEvent.order_item_id == order_item_id,
            PrintEvent.type == PrintEventType.COMPLETE,
            PrintEvent.garment_type.isnot(None),
        )
        .group_by(PrintEvent.garment_type)
        .all()
    )
    totals = {GarmentType.DARK: 0, GarmentType.LIGHT: 0}
    for garment_type, count in rows:
        totals[garment_type] = int(count or 0)
    return totals


def derive_order_item_status(order_item: OrderItem) -> str:
    """COMPLETED once printed covers required, else IN_PROGRESS."""
    if order_item.total_printed >= order_item.total_required:
        return OrderItemStatus.COMPLETED
    return OrderItemStatus.IN_PROGRESS


def reconcile_order_item(db: Session, order_item_id: str) -> Optional[OrderItem]:
    """
    Recompute an order item's printed counters from the event log.

    Best effort: a missing item or a failed update is logged and None is
    returned.
    """
    try:
        order_item = db.query(OrderItem).filter(OrderItem.id == order_item_id).first()
        if not order_item:
            logger.warning(f"Order item {order_item_id} not found, skipping reconciliation")
            return None

        totals = printed_totals(db, order_item_id)
        order_item.printed_dark = totals[GarmentType.DARK]
        order_item.printed_light = totals[GarmentType.LIGHT]
        order_item.status = derive_order_item_status(order_item)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update order item {order_item_id}: {e}")
        return None

    logger.info(
        f"Order item {order_item_id} printed {order_item.total_printed}/"
        f"{order_item.total_required} -> {order_item.status}"
    )
    return order_item


def apply_machine_state(db: Session, machine: Machine, event: PrintEventPayload) -> None:
    """
    Track the printing state of the machine.

    START marks the machine printing the job; COMPLETE, ERROR and CANCEL
    clear it. PROGRESS leaves it alone. Failures are logged only.
    """
    if event.type == PrintEventType.START:
        machine.is_printing = True
        machine.active_session = event.print_job_id
    elif event.type in PrintEventType.TERMINAL:
        machine.is_printing = False
        machine.active_session = None
    else:
        return

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update printing state of {machine.device_id}: {e}")


def ingest_print_event(
    db: Session,
    machine: Machine,
    device_id: str,
    event: PrintEventPayload,
) -> IngestResult:
    """
    Store a print event and apply its side effects once.

    Args:
        db: Database session
        machine: Authenticated machine that emitted the event
        device_id: Device id from the request header
        event: Validated event body

    Returns:
        IngestResult with the stored (or previously stored) event id

    Raises:
        DependencyError: If the event cannot be stored
    """
    idempotency_key = build_idempotency_key(device_id, event)
    result = store_print_event(db, machine, event, idempotency_key)
    if result.duplicate:
        return result

    if event.carries_garment_count:
        reconcile_order_item(db, event.payload.order_item_id)

    apply_machine_state(db, machine, event)

    logger.info(f"Print event processed successfully: {result.event_id}")
    return result

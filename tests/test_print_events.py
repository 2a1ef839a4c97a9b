"""Print event ingestion tests."""

import pytest

from fusion_edge.models import Machine, Order, OrderItem, PrintEvent, School
from fusion_edge.schemas.device import PrintEventPayload
from fusion_edge.services.print_event_service import build_idempotency_key

from tests.utils import DEVICE_ID, signed_post


@pytest.fixture
def order_item(test_db):
    school = School(name="Test School")
    test_db.add(school)
    test_db.flush()
    order = Order(created_by_school=school.id, status="IN_PROGRESS")
    test_db.add(order)
    test_db.flush()
    item = OrderItem(order_id=order.id, dark_count=10, light_count=0)
    test_db.add(item)
    test_db.commit()
    test_db.refresh(item)
    return item


def complete_event(order_item_id, count, key=None, job="job-1"):
    body = {
        "print_job_id": job,
        "type": "COMPLETE",
        "payload": {"order_item_id": order_item_id, "garment_type": "DARK", "garment_count": count},
    }
    if key:
        body["idempotency_key"] = key
    return body


def test_start_marks_machine_printing(client, machine, test_db):
    response = signed_post(client, "/device-print-events", {
        "print_job_id": "job-1",
        "type": "START",
        "payload": {"student_name": "Amina"},
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["event_id"]
    assert "message" not in data

    test_db.expire_all()
    stored = test_db.query(Machine).filter_by(device_id=DEVICE_ID).one()
    assert stored.is_printing is True
    assert stored.active_session == "job-1"


def test_complete_event_finishes_order_item(client, machine, order_item, test_db):
    response = signed_post(client, "/device-print-events", complete_event(order_item.id, 10))
    assert response.status_code == 200

    test_db.expire_all()
    item = test_db.query(OrderItem).filter_by(id=order_item.id).one()
    assert item.printed_dark == 10
    assert item.status == "COMPLETED"

    stored = test_db.query(Machine).filter_by(device_id=DEVICE_ID).one()
    assert stored.is_printing is False
    assert stored.active_session is None


def test_partial_complete_leaves_item_in_progress(client, machine, order_item, test_db):
    response = signed_post(client, "/device-print-events", complete_event(order_item.id, 5))
    assert response.status_code == 200

    test_db.expire_all()
    item = test_db.query(OrderItem).filter_by(id=order_item.id).one()
    assert item.printed_dark == 5
    assert item.status == "IN_PROGRESS"


def test_replayed_idempotency_key_applies_once(client, machine, order_item, test_db):
    body = complete_event(order_item.id, 5, key="evt-42")

    first = signed_post(client, "/device-print-events", body)
    second = signed_post(client, "/device-print-events", body)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json() == {
        "success": True,
        "event_id": first.json()["event_id"],
        "message": "Event already processed",
    }

    test_db.expire_all()
    assert test_db.query(PrintEvent).count() == 1
    item = test_db.query(OrderItem).filter_by(id=order_item.id).one()
    assert item.printed_dark == 5


def test_identical_body_without_key_is_deduplicated(client, machine, order_item, test_db):
    body = complete_event(order_item.id, 3)

    first = signed_post(client, "/device-print-events", body)
    second = signed_post(client, "/device-print-events", body)

    assert second.json()["event_id"] == first.json()["event_id"]
    assert second.json()["message"] == "Event already processed"
    assert test_db.query(PrintEvent).count() == 1


def test_separate_completes_accumulate(client, machine, order_item, test_db):
    signed_post(client, "/device-print-events", complete_event(order_item.id, 4, key="a"))
    signed_post(client, "/device-print-events", complete_event(order_item.id, 6, key="b"))

    test_db.expire_all()
    item = test_db.query(OrderItem).filter_by(id=order_item.id).one()
    assert item.printed_dark == 10
    assert item.status == "COMPLETED"


def test_unknown_order_item_still_stores_event(client, machine, test_db):
    response = signed_post(client, "/device-print-events", complete_event("missing-item", 2))
    assert response.status_code == 200
    assert test_db.query(PrintEvent).count() == 1


def test_event_stored_when_order_item_update_fails(client, machine, order_item, test_db, failing_flush):
    original_status = order_item.status
    failing_flush(OrderItem)

    response = signed_post(client, "/device-print-events", complete_event(order_item.id, 10))

    assert response.status_code == 200
    assert response.json()["success"] is True

    test_db.expire_all()
    assert test_db.query(PrintEvent).count() == 1
    item = test_db.query(OrderItem).filter_by(id=order_item.id).one()
    assert item.printed_dark == 0
    assert item.status == original_status

    stored = test_db.query(Machine).filter_by(device_id=DEVICE_ID).one()
    assert stored.is_printing is False


def test_missing_required_fields(client, machine):
    response = signed_post(client, "/device-print-events", {"print_job_id": "job-1", "type": "START"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: print_job_id, type, payload"}


def test_invalid_event_type(client, machine):
    response = signed_post(client, "/device-print-events", {
        "print_job_id": "job-1",
        "type": "EXPLODE",
        "payload": {},
    })
    assert response.status_code == 400
    assert response.json()["error"].startswith("type:")


def test_bad_signature_stores_nothing(client, machine, test_db):
    response = signed_post(
        client, "/device-print-events",
        {"print_job_id": "job-1", "type": "START", "payload": {}},
        secret="wrong-secret",
    )
    assert response.status_code == 401
    assert test_db.query(PrintEvent).count() == 0


def test_derived_key_is_deterministic_and_content_sensitive():
    event = PrintEventPayload.model_validate({
        "print_job_id": "job-1",
        "type": "PROGRESS",
        "payload": {"progress_percentage": 40},
    })
    other = PrintEventPayload.model_validate({
        "print_job_id": "job-1",
        "type": "PROGRESS",
        "payload": {"progress_percentage": 60},
    })

    key = build_idempotency_key(DEVICE_ID, event)
    assert key == build_idempotency_key(DEVICE_ID, event)
    assert key.startswith(f"{DEVICE_ID}-job-1-PROGRESS-")
    assert key != build_idempotency_key(DEVICE_ID, other)


def test_caller_key_wins():
    event = PrintEventPayload.model_validate({
        "print_job_id": "job-1",
        "type": "START",
        "payload": {},
        "idempotency_key": "mine",
    })
    assert build_idempotency_key(DEVICE_ID, event) == "mine"

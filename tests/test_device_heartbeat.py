"""Device heartbeat endpoint tests."""

from fusion_edge.models import Machine, MachineLocation

from tests.utils import DEVICE_ID, PREFIX, signed_post


def test_heartbeat_updates_machine(client, machine, test_db):
    response = signed_post(client, "/device-heartbeat", {
        "is_online": True,
        "is_printing": False,
        "model": "DTF-2",
        "sessions_held": 3,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["device_id"] == DEVICE_ID
    assert data["timestamp"].endswith("Z")

    test_db.expire_all()
    stored = test_db.query(Machine).filter_by(device_id=DEVICE_ID).one()
    assert stored.is_online is True
    assert stored.model == "DTF-2"
    assert stored.sessions_held == 3
    assert stored.last_seen_at is not None


def test_heartbeat_keeps_fields_not_sent(client, machine, test_db):
    response = signed_post(client, "/device-heartbeat", {"is_online": True, "firmware_version": ""})
    assert response.status_code == 200

    test_db.expire_all()
    stored = test_db.query(Machine).filter_by(device_id=DEVICE_ID).one()
    assert stored.firmware_version == "1.0.0"


def test_heartbeat_explicit_nulls(client, machine, test_db):
    machine.is_printing = True
    machine.sessions_held = 4
    machine.active_session = "job-7"
    test_db.commit()

    response = signed_post(client, "/device-heartbeat", {
        "is_online": True,
        "is_printing": None,
        "sessions_held": None,
        "active_session": None,
    })
    assert response.status_code == 200

    test_db.expire_all()
    stored = test_db.query(Machine).filter_by(device_id=DEVICE_ID).one()
    assert stored.is_printing is True
    assert stored.sessions_held == 4
    assert stored.active_session is None


def test_heartbeat_records_location(client, machine, test_db):
    response = signed_post(client, "/device-heartbeat", {
        "is_online": True,
        "location": {"lat": -6.8, "lng": 39.28},
    })
    assert response.status_code == 200

    samples = test_db.query(MachineLocation).filter_by(machine_id=machine.id).all()
    assert len(samples) == 1
    assert samples[0].provider == "device"


def test_heartbeat_succeeds_when_location_cannot_be_stored(client, machine, test_db, failing_flush):
    failing_flush(MachineLocation)

    response = signed_post(client, "/device-heartbeat", {
        "is_online": True,
        "sessions_held": 2,
        "location": {"lat": -6.8, "lng": 39.28},
    })

    assert response.status_code == 200
    assert response.json()["success"] is True

    test_db.expire_all()
    stored = test_db.query(Machine).filter_by(device_id=DEVICE_ID).one()
    assert stored.is_online is True
    assert stored.sessions_held == 2
    assert test_db.query(MachineLocation).count() == 0


def test_heartbeat_without_signature_is_accepted(client, machine):
    response = signed_post(client, "/device-heartbeat", {"is_online": True}, secret=None)
    assert response.status_code == 200


def test_heartbeat_without_signature_rejected_when_required(client, machine, app):
    app.state.settings.require_device_signature = True
    response = signed_post(client, "/device-heartbeat", {"is_online": True}, secret=None)
    assert response.status_code == 401
    assert response.json() == {"error": "Signature required"}


def test_heartbeat_bad_signature(client, machine):
    response = signed_post(client, "/device-heartbeat", {"is_online": True}, secret="wrong-secret")
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid signature"}


def test_heartbeat_missing_device_header(client, machine):
    response = client.post(f"{PREFIX}/device-heartbeat", json={"is_online": True})
    assert response.status_code == 400
    assert response.json() == {"error": "Device ID header required"}


def test_heartbeat_invalid_json(client, machine):
    response = client.post(
        f"{PREFIX}/device-heartbeat",
        content=b"{not json",
        headers={"x-device-id": DEVICE_ID, "content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON payload"}


def test_heartbeat_unknown_device(client, machine):
    response = signed_post(client, "/device-heartbeat", {"is_online": True}, device_id="ghost")
    assert response.status_code == 404
    assert response.json() == {"error": "Device not registered"}


def test_heartbeat_requires_is_online(client, machine):
    response = signed_post(client, "/device-heartbeat", {"model": "DTF-2"})
    assert response.status_code == 400
    assert response.json() == {"error": "is_online is required"}


def test_heartbeat_rejects_unknown_fields(client, machine):
    response = signed_post(client, "/device-heartbeat", {"is_online": True, "colour": "blue"})
    assert response.status_code == 400
    assert response.json() == {"error": "Unexpected field: colour"}

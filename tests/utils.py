"""Shared test constants and helpers."""

import json

from kombu.exceptions import OperationalError

from fusion_edge.services.signature import compute_signature

DEVICE_ID = "printer-001"
DEVICE_SECRET = "test-device-secret"
PREFIX = "/functions/v1"


def signed_post(client, path, body, device_id=DEVICE_ID, secret=DEVICE_SECRET, signature=None):
    """POST a JSON body with device headers and an HMAC signature over the exact bytes sent."""
    raw = json.dumps(body).encode("utf-8")
    headers = {"x-device-id": device_id, "content-type": "application/json"}
    if signature is None and secret is not None:
        signature = compute_signature(raw, secret)
    if signature is not None:
        headers["x-device-signature"] = signature
    return client.post(f"{PREFIX}{path}", content=raw, headers=headers)


class UnreachableBroker:
    """Celery stand-in whose broker refuses every message."""

    def __init__(self):
        self.attempts = 0

    def send_task(self, name, args=None, kwargs=None, **options):
        self.attempts += 1
        raise OperationalError("Error 111 connecting to localhost:6379. Connection refused.")

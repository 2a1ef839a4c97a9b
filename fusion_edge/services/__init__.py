"""Business logic services."""

from fusion_edge.services.device_service import apply_heartbeat, authenticate_device
from fusion_edge.services.print_event_service import ingest_print_event
from fusion_edge.services.referral_service import calculate_commission, notify_code_used, notify_first_order
from fusion_edge.services.signature import compute_signature, verify_signature

__all__ = [
    "apply_heartbeat",
    "authenticate_device",
    "ingest_print_event",
    "calculate_commission",
    "notify_code_used",
    "notify_first_order",
    "compute_signature",
    "verify_signature",
]

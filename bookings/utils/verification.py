"""
Per-booking gate deciding whether sample results may be downloaded.

The gate is derived from the newest signed service form, signed working
area agreement and payment receipt of a booking. It is never stored; reads
go through a short-lived cache entry that every document mutation clears.
"""
import logging

from django.conf import settings
from django.core.cache import cache

from bookings.models import Booking, BookingDocument
from bookings.utils.documents import get_latest_documents_by_type

logger = logging.getLogger(__name__)

CACHE_KEY = "booking:{booking_id}:verification-state"

GATE_LABELS = {
    "service_form_signed": "Signed Service Form",
    "workspace_form_signed": "Signed Working Area Agreement",
    "payment_receipt": "Payment Receipt",
}

ELIGIBLE_MESSAGE = "All documents verified. Results are available for download."
LOCKED_MESSAGE = "Results are locked. Awaiting verification of: {pending}."


def _gate_status(document):
    return document.verification_status if document is not None else BookingDocument.PENDING_UPLOAD


def compute_verification_state(latest, requires_workspace_form):
    """
    Build the gate fields from a ``get_latest_documents_by_type`` result.

    A gate is the status of the newest document of its signed type, or
    ``pending_upload`` when nothing was uploaded. The workspace gate is
    ``not_required`` when the booking has no workspace component.
    """
    if requires_workspace_form:
        workspace_status = _gate_status(latest.get(BookingDocument.WORKSPACE_FORM_SIGNED))
    else:
        workspace_status = BookingDocument.NOT_REQUIRED

    return {
        "service_form_signed": _gate_status(latest.get(BookingDocument.SERVICE_FORM_SIGNED)),
        "workspace_form_signed": workspace_status,
        "payment_receipt": _gate_status(latest.get(BookingDocument.PAYMENT_RECEIPT)),
        "requires_workspace_form": bool(requires_workspace_form),
    }


def _passes(status):
    return status in (BookingDocument.VERIFIED, BookingDocument.NOT_REQUIRED)


def compute_download_eligibility(state):
    service_ok = _passes(state["service_form_signed"])
    workspace_ok = _passes(state["workspace_form_signed"])
    payment_ok = _passes(state["payment_receipt"])

    pending = [
        GATE_LABELS[gate]
        for gate, ok in (
            ("service_form_signed", service_ok),
            ("workspace_form_signed", workspace_ok),
            ("payment_receipt", payment_ok),
        )
        if not ok
    ]
    is_eligible = not pending

    return {
        "is_eligible": is_eligible,
        "service_form_verified": service_ok,
        "workspace_form_verified": workspace_ok,
        "payment_verified": payment_ok,
        "requires_workspace_form": state["requires_workspace_form"],
        "message": ELIGIBLE_MESSAGE if is_eligible else LOCKED_MESSAGE.format(pending=", ".join(pending)),
    }


# ============================================================
# 🔹 Cached read-through wrappers
# ============================================================
def _cache_key(booking_id):
    return CACHE_KEY.format(booking_id=booking_id)


def get_document_verification_state(booking_id):
    key = _cache_key(booking_id)
    state = cache.get(key)
    if state is not None:
        return state

    booking = Booking.objects.get(pk=booking_id)
    latest = get_latest_documents_by_type(booking.pk)
    state = compute_verification_state(latest, booking.requires_workspace_form)
    cache.set(key, state, getattr(settings, "VERIFICATION_STATE_CACHE_TTL", 300))
    return state


def check_download_eligibility(booking_id):
    return compute_download_eligibility(get_document_verification_state(booking_id))


def invalidate_verification_state(booking_id):
    cache.delete(_cache_key(booking_id))
    logger.debug(f"Booking {booking_id}: verification state cache cleared")

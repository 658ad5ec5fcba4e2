import logging

from django.contrib.contenttypes.models import ContentType

from bookings.models import BookingDocument
from notifications.models import Notification

logger = logging.getLogger(__name__)

VERIFIED_TITLES = {
    BookingDocument.SERVICE_FORM_SIGNED: "Service Form Verified",
    BookingDocument.WORKSPACE_FORM_SIGNED: "Working Area Agreement Verified",
    BookingDocument.PAYMENT_RECEIPT: "Payment Verified",
}

VERIFIED_EVENTS = {
    BookingDocument.SERVICE_FORM_SIGNED: "forms_signed_verified",
    BookingDocument.WORKSPACE_FORM_SIGNED: "forms_signed_verified",
    BookingDocument.PAYMENT_RECEIPT: "payment_verified",
}


def _enqueue_in_app(recipient_id, event, subject, message, related=None):
    notification = Notification(
        recipient_id=recipient_id,
        notification_type="in_app",
        event=event,
        subject=subject,
        message=message,
        status="sent",
    )
    if related is not None:
        notification.content_type = ContentType.objects.get_for_model(related)
        notification.object_id = str(related.pk)
    notification.save()
    return notification


def send_document_verified_notification(document: BookingDocument) -> Notification:
    """Tell the booking owner their uploaded document was accepted."""
    booking = document.booking
    label = BookingDocument.type_label(document.type)
    message = f"Your {label} for booking {booking.reference_number} has been verified."

    notification = _enqueue_in_app(
        booking.user_id,
        VERIFIED_EVENTS.get(document.type, "process_complete"),
        VERIFIED_TITLES.get(document.type, "Document Verified"),
        message,
        related=booking,
    )
    logger.info(f"Booking {booking.reference_number}: verified notification queued for user {booking.user_id}")
    return notification


def send_document_rejected_notification(document: BookingDocument, reason: str) -> Notification:
    """Tell the booking owner their upload was rejected and needs replacing."""
    booking = document.booking
    label = BookingDocument.type_label(document.type)
    message = (
        f"Your {label} for booking {booking.reference_number} was rejected. "
        f"Reason: {reason}. Please upload a new document."
    )

    notification = _enqueue_in_app(
        booking.user_id,
        "document_rejected",
        f"{label} Rejected",
        message,
        related=booking,
    )
    logger.info(f"Booking {booking.reference_number}: rejection notification queued for user {booking.user_id}")
    return notification

"""
Read-side queries over booking documents.

Every list is newest first, with the blob, uploader and verifier joined in
so serializers never go back to the database per row.
"""
from bookings.models import BookingDocument

DOCUMENT_TYPES = [choice for choice, _ in BookingDocument.TYPE_CHOICES]


def _document_queryset():
    return BookingDocument.objects.select_related("blob", "booking", "created_by", "verified_by")


def get_booking_documents(booking_id):
    return list(
        _document_queryset()
        .filter(booking_id=booking_id)
        .order_by("-created_at", "-pk")
    )


def get_booking_documents_by_type(booking_id, doc_type):
    return list(
        _document_queryset()
        .filter(booking_id=booking_id, type=doc_type)
        .order_by("-created_at", "-pk")
    )


def get_latest_documents_by_type(booking_id):
    """
    Newest document of each of the seven document types for a booking.

    The result always contains every type; types without a document map to None.
    """
    latest = {doc_type: None for doc_type in DOCUMENT_TYPES}
    for document in _document_queryset().filter(booking_id=booking_id).order_by("-created_at", "-pk"):
        if latest.get(document.type) is None:
            latest[document.type] = document
    return latest


def get_latest_document(booking_id, doc_type):
    return (
        _document_queryset()
        .filter(booking_id=booking_id, type=doc_type)
        .order_by("-created_at", "-pk")
        .first()
    )


def get_booking_document_by_id(document_id):
    return _document_queryset().filter(pk=document_id).first()


def get_document_with_booking_owner(document_id):
    """Returns ``(document, owner_id)`` or None when the document does not exist."""
    document = get_booking_document_by_id(document_id)
    if document is None:
        return None
    return document, document.booking.user_id


def get_pending_verification_documents():
    return list(
        _document_queryset()
        .select_related("booking__user")
        .filter(
            type__in=BookingDocument.VERIFIABLE_TYPES,
            verification_status=BookingDocument.PENDING_VERIFICATION,
        )
        .order_by("created_at", "pk")
    )

"""
Document mutations: upload, verify, reject, delete.

Each mutation runs in one transaction. Cache invalidation, the audit event
and the owner notification are registered with ``transaction.on_commit`` so
they only fire once the change is durable, and their failures never reach
the caller.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from audit.utils import log_audit_event
from bookings.exceptions import DocumentNotFound, DocumentStateConflict, Forbidden
from bookings.models import Booking, BookingDocument, FileBlob
from bookings.utils.documents import (
    get_booking_document_by_id,
    get_document_with_booking_owner,
    get_latest_document,
)
from bookings.utils.s3_utils import delete_from_s3, upload_to_s3
from bookings.utils.verification import check_download_eligibility, invalidate_verification_state
from notifications.utils.document_notifications import (
    send_document_rejected_notification,
    send_document_verified_notification,
)
from payments.utils import amend_payment_metadata, record_verified_payment, serialize_payment_note

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "BookingDocument"


# ============================================================
# 🔹 Guards
# ============================================================
def _require_admin(user):
    if not (user and user.is_authenticated and user.is_account_active and user.is_lab_admin):
        raise Forbidden()


def _transition(document_id, **changes):
    """
    Move a document out of ``pending_verification`` with a conditional update.

    Zero rows updated means either the row is gone (404) or another request
    already decided it (409).
    """
    updated = BookingDocument.objects.filter(
        pk=document_id,
        verification_status=BookingDocument.PENDING_VERIFICATION,
    ).update(**changes)

    if updated:
        return
    if not BookingDocument.objects.filter(pk=document_id).exists():
        raise DocumentNotFound()
    raise DocumentStateConflict()


def _load_verifiable(document_id):
    document = get_booking_document_by_id(document_id)
    if document is None:
        raise DocumentNotFound()
    if not document.is_verifiable:
        raise ValidationError({"type": [f"Document type '{document.type}' cannot be verified."]})
    return document


def _notify_safely(send, *args):
    try:
        send(*args)
    except Exception as e:
        logger.error(f"[Document Notification] {send.__name__} failed: {e}")


def _on_commit_invalidate(booking_id):
    transaction.on_commit(lambda: invalidate_verification_state(booking_id))


# ============================================================
# 🔹 Verify / reject
# ============================================================
def verify_document(document_id, user, notes=None, payment_method=None, amount=None):
    """
    Mark a pending document as verified.

    Payment receipts additionally get their method/amount corrected when
    given, and a verified Payment is booked against the latest invoice.
    Returns ``(document, payment)``; payment is None for non-receipts.
    """
    _require_admin(user)

    with transaction.atomic():
        document = _load_verifiable(document_id)
        now = timezone.now()

        changes = {
            "verification_status": BookingDocument.VERIFIED,
            "verified_by": user,
            "verified_at": now,
            "verification_notes": notes or None,
            "rejection_reason": None,
        }
        is_receipt = document.type == BookingDocument.PAYMENT_RECEIPT
        if is_receipt and (payment_method or amount not in (None, "")):
            amend_payment_metadata(document, payment_method=payment_method, amount=amount)
            changes["payment_metadata"] = document.payment_metadata
            changes["note"] = document.note

        _transition(document.pk, **changes)
        for field, value in changes.items():
            setattr(document, field, value)

        payment = None
        if is_receipt:
            payment = record_verified_payment(document, user, payment_method=payment_method, amount=amount, notes=notes)

        booking = document.booking
        _on_commit_invalidate(booking.pk)
        log_audit_event(
            user.pk,
            f"verify_{document.type}",
            AUDIT_ENTITY,
            document.pk,
            {
                "booking_id": booking.pk,
                "booking_reference": booking.reference_number,
                "document_type": document.type,
                "payment_id": payment.pk if payment else None,
                "notes": notes,
            },
        )
        transaction.on_commit(lambda: _notify_safely(send_document_verified_notification, document))

    logger.info(f"Document {document.pk} ({document.type}) verified by user {user.pk}")
    return document, payment


def reject_document(document_id, user, reason):
    _require_admin(user)

    # Validated before touching the database
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError({"reason": ["Rejection reason is required."]})

    with transaction.atomic():
        document = _load_verifiable(document_id)
        changes = {
            "verification_status": BookingDocument.REJECTED,
            "rejection_reason": reason,
            "verified_by": user,
            "verified_at": timezone.now(),
        }
        _transition(document.pk, **changes)
        for field, value in changes.items():
            setattr(document, field, value)

        booking = document.booking
        _on_commit_invalidate(booking.pk)
        log_audit_event(
            user.pk,
            f"reject_{document.type}",
            AUDIT_ENTITY,
            document.pk,
            {
                "booking_id": booking.pk,
                "booking_reference": booking.reference_number,
                "document_type": document.type,
                "reason": reason,
            },
        )
        transaction.on_commit(lambda: _notify_safely(send_document_rejected_notification, document, reason))

    logger.info(f"Document {document.pk} ({document.type}) rejected by user {user.pk}")
    return document


# ============================================================
# 🔹 Upload / delete / download
# ============================================================
def _validate_file(file_obj):
    if not file_obj:
        raise ValidationError({"file": ["File is required."]})

    max_bytes = settings.DOCUMENT_UPLOAD_MAX_BYTES
    if file_obj.size > max_bytes:
        raise ValidationError({"file": [f"File exceeds the {max_bytes // (1024 * 1024)}MB limit."]})

    allowed = settings.DOCUMENT_UPLOAD_ALLOWED_TYPES
    if getattr(file_obj, "content_type", None) not in allowed:
        raise ValidationError({"file": [f"Unsupported file type '{getattr(file_obj, 'content_type', None)}'."]})


def _check_upload_allowed(booking, user, doc_type):
    is_admin = user.is_lab_admin
    if not is_admin and booking.user_id != user.pk:
        raise Forbidden("You don't have permission to upload documents for this booking")
    if not is_admin and doc_type not in BookingDocument.USER_UPLOADABLE_TYPES:
        raise Forbidden("Only administrators can upload this document type")

    if doc_type not in BookingDocument.VERIFIABLE_TYPES:
        return

    latest = get_latest_document(booking.pk, doc_type)
    if latest is None:
        return
    label = BookingDocument.type_label(doc_type)
    if latest.verification_status == BookingDocument.PENDING_VERIFICATION:
        raise DocumentStateConflict(f"A {label} is already awaiting verification.")
    if latest.verification_status == BookingDocument.VERIFIED:
        raise DocumentStateConflict(f"The {label} has already been verified.")


def upload_booking_document(booking, user, doc_type, file_obj, note=None, payment_metadata=None):
    """
    Store a new document for a booking.

    Always creates a new row, so earlier (e.g. rejected) uploads of the same
    type stay in history. Verifiable types start ``pending_verification``;
    administrator documents start ``not_required``.
    """
    _check_upload_allowed(booking, user, doc_type)
    _validate_file(file_obj)

    stored = upload_to_s3(file_obj, prefix=f"booking_docs/{booking.pk}/")

    if doc_type == BookingDocument.PAYMENT_RECEIPT:
        metadata = {k: v for k, v in (payment_metadata or {}).items() if v not in (None, "")}
        note = serialize_payment_note(metadata)
    else:
        metadata = None

    status = (
        BookingDocument.PENDING_VERIFICATION
        if doc_type in BookingDocument.VERIFIABLE_TYPES
        else BookingDocument.NOT_REQUIRED
    )

    try:
        with transaction.atomic():
            # Concurrent uploads for the same booking queue up here and re-check the latest document
            Booking.objects.select_for_update().filter(pk=booking.pk).first()
            _check_upload_allowed(booking, user, doc_type)

            blob = FileBlob.objects.create(uploaded_by=user, **stored)
            document = BookingDocument.objects.create(
                booking=booking,
                blob=blob,
                type=doc_type,
                verification_status=status,
                note=note,
                payment_metadata=metadata,
                created_by=user,
            )
            _on_commit_invalidate(booking.pk)
            log_audit_event(
                user.pk,
                f"upload_{doc_type}",
                AUDIT_ENTITY,
                document.pk,
                {
                    "booking_id": booking.pk,
                    "booking_reference": booking.reference_number,
                    "document_type": doc_type,
                    "file_name": blob.file_name,
                },
            )
    except Exception:
        # Row never made it; don't leave the object behind
        delete_from_s3(stored["key"])
        raise

    logger.info(f"Booking {booking.reference_number}: {doc_type} uploaded by user {user.pk}")
    return document


def _load_with_access(document_id, user, denied_message):
    result = get_document_with_booking_owner(document_id)
    if result is None:
        raise DocumentNotFound()
    document, owner_id = result
    if not user.is_lab_admin and owner_id != user.pk:
        raise Forbidden(denied_message)
    return document


def delete_booking_document(document_id, user):
    """
    Owners may delete their own unverified documents; administrators any document.
    The storage object is removed only after the delete commits, best-effort.
    """
    document = _load_with_access(document_id, user, "You don't have permission to delete this document")
    if not user.is_lab_admin and document.verification_status == BookingDocument.VERIFIED:
        raise Forbidden("Cannot delete a verified document")

    blob = document.blob
    booking_id = document.booking_id
    with transaction.atomic():
        document.delete()
        blob.delete()
        transaction.on_commit(lambda: delete_from_s3(blob.key))
        _on_commit_invalidate(booking_id)
        log_audit_event(
            user.pk,
            "document_deleted",
            AUDIT_ENTITY,
            document_id,
            {
                "booking_id": booking_id,
                "document_type": document.type,
                "file_name": blob.file_name,
            },
        )

    logger.info(f"Document {document_id} ({document.type}) deleted by user {user.pk}")


def record_document_download(document_id, user):
    """
    Access-check a download and audit it. Returns the document.

    Members can only fetch sample results once the booking's download gate
    is open; administrators are not gated.
    """
    document = _load_with_access(document_id, user, "You don't have permission to download this document")
    if document.type == BookingDocument.SAMPLE_RESULT and not user.is_lab_admin:
        eligibility = check_download_eligibility(document.booking_id)
        if not eligibility["is_eligible"]:
            logger.info(f"Booking {document.booking_id}: result download refused for user {user.pk}")
            raise Forbidden(eligibility["message"])

    log_audit_event(
        user.pk,
        "document_downloaded",
        AUDIT_ENTITY,
        document.pk,
        {
            "booking_id": document.booking_id,
            "document_type": document.type,
            "file_name": document.blob.file_name,
        },
    )
    return document

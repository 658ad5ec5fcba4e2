import json
import logging
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.db.models import OuterRef, Q, Subquery
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from bookings.models import BookingDocument, ServiceForm
from payments.models import Invoice, Payment
from users.models import User

logger = logging.getLogger(__name__)

METADATA_KEYS = ("amount", "paymentMethod", "paymentDate", "referenceNumber")
DEFAULT_PAYMENT_METHOD = Payment.METHOD_EFT
HISTORY_STATUSES = [BookingDocument.VERIFIED, BookingDocument.REJECTED]


# ============================================================
# 🔹 Metadata helpers
# ============================================================
def parse_payment_metadata(note, document_id=None):
    """
    Decode the JSON payload stored in a receipt note.

    Never raises: empty notes, malformed JSON and non-object JSON all give ``{}``.
    Malformed payloads are logged with the document id.
    """
    if not note:
        return {}
    try:
        data = json.loads(note)
    except (TypeError, ValueError) as e:
        logger.warning(f"Unparseable payment metadata on document {document_id}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Payment metadata on document {document_id} is not a JSON object")
        return {}
    return data


def serialize_payment_note(metadata):
    # Compact separators keep the legacy '"paymentMethod":"<m>"' substring filter working
    return json.dumps(metadata, separators=(",", ":"), default=str)


def get_payment_metadata(document):
    """Structured column first, legacy note for rows the backfill has not reached."""
    if document.payment_metadata is not None:
        return dict(document.payment_metadata) if isinstance(document.payment_metadata, dict) else {}
    return parse_payment_metadata(document.note, document.id)


def amend_payment_metadata(document, payment_method=None, amount=None):
    """
    Apply corrected method / amount to a receipt's metadata.

    Updates both the structured column and the note on the instance (not saved)
    and returns the new metadata dict.
    """
    metadata = get_payment_metadata(document)
    if payment_method:
        metadata["paymentMethod"] = payment_method
    if amount is not None and amount != "":
        metadata["amount"] = str(amount)
    document.payment_metadata = metadata
    document.note = serialize_payment_note(metadata)
    return metadata


# ============================================================
# 🔹 Query helpers
# ============================================================
def _receipt_queryset():
    latest_form_number = (
        ServiceForm.objects.filter(booking_id=OuterRef("booking_id"))
        .order_by("-created_at")
        .values("form_number")[:1]
    )
    return (
        BookingDocument.objects.filter(type=BookingDocument.PAYMENT_RECEIPT)
        .select_related(
            "blob",
            "created_by",
            "booking",
            "booking__user",
            "booking__user__faculty",
            "booking__user__department",
            "booking__user__ikohza",
            "booking__user__company",
            "booking__user__company_branch",
        )
        .annotate(latest_form_number=Subquery(latest_form_number))
    )


def method_filter(method):
    legacy_fragment = f'"paymentMethod":"{method}"'
    return Q(payment_metadata__paymentMethod=method) | Q(
        payment_metadata__isnull=True, note__contains=legacy_fragment
    )


def search_filter(q):
    return (
        Q(booking__reference_number__icontains=q)
        | Q(booking__user__first_name__icontains=q)
        | Q(booking__user__last_name__icontains=q)
        | Q(booking__user__email__icontains=q)
        | Q(latest_form_number__icontains=q)
    )


def _apply_common_filters(qs, q=None, method=None):
    if method:
        qs = qs.filter(method_filter(method))
    if q and q.strip():
        qs = qs.filter(search_filter(q.strip()))
    return qs


def _to_bound(value, end=False):
    """
    Normalise a date-range bound into an aware datetime.

    Date-only values cover the whole day: a lower bound starts at midnight,
    an upper bound is exclusive at the following midnight.
    Returns ``(datetime, inclusive)``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = None
        day = value
    else:
        parsed = parse_datetime(str(value))
        day = None if parsed else parse_date(str(value))
        if parsed is None and day is None:
            raise ValueError(f"Invalid date: {value}")

    if parsed is not None:
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed, True

    if end:
        return timezone.make_aware(datetime.combine(day + timedelta(days=1), time.min)), False
    return timezone.make_aware(datetime.combine(day, time.min)), True


def _paginate(qs, page, page_size):
    page = max(int(page or 1), 1)
    page_size = max(int(page_size or 1), 1)
    offset = (page - 1) * page_size
    return list(qs[offset:offset + page_size])


# ============================================================
# 🔹 View-model builders
# ============================================================
def _display_name(user):
    return user.full_name or user.email


def _resolve_verifier_names(documents):
    verifier_ids = {doc.verified_by_id for doc in documents if doc.verified_by_id}
    if not verifier_ids:
        return {}
    return {user.pk: _display_name(user) for user in User.objects.filter(pk__in=verifier_ids)}


def compute_age_days(created_at, now=None):
    """Whole days since upload, rounded up."""
    now = now or timezone.now()
    return math.ceil((now - created_at).total_seconds() / 86400)


def build_payment_receipt(document, verifier_names=None, now=None):
    metadata = get_payment_metadata(document)
    verifier_names = verifier_names or {}
    booking = document.booking
    owner = booking.user
    uploader = document.created_by

    amount = metadata.get("amount")
    verified_by = None
    if document.verified_by_id:
        verified_by = {
            "id": document.verified_by_id,
            "name": verifier_names.get(document.verified_by_id, "Unknown"),
        }

    return {
        "id": str(document.id),
        "booking_id": str(booking.id),
        "booking_ref": booking.reference_number,
        "form_number": getattr(document, "latest_form_number", None) or "N/A",

        "amount": str(amount) if amount not in (None, "") else "0",
        "payment_method": metadata.get("paymentMethod") or DEFAULT_PAYMENT_METHOD,
        "payment_date": metadata.get("paymentDate") or document.created_at.isoformat(),
        "reference_number": metadata.get("referenceNumber") or None,

        "verification_status": document.verification_status,
        "rejection_reason": document.rejection_reason,

        "receipt_url": document.blob.url,
        "file_name": document.blob.file_name,
        "mime_type": document.blob.mime_type,

        "client": {
            "id": owner.id,
            "name": owner.full_name,
            "email": owner.email,
            "user_type": owner.user_type,
        },
        "organization": owner.organization_name,

        "uploaded_by": {"id": uploader.id, "name": uploader.full_name},
        "uploaded_at": document.created_at.isoformat(),
        "verified_by": verified_by,
        "verified_at": document.verified_at.isoformat() if document.verified_at else None,

        "age": compute_age_days(document.created_at, now),
    }


def _build_page(documents):
    verifier_names = _resolve_verifier_names(documents)
    now = timezone.now()
    return [build_payment_receipt(doc, verifier_names, now) for doc in documents]


# ============================================================
# 🔹 Receipt queues
# ============================================================
def list_pending_payment_receipts(q=None, method=None, page=1, page_size=20):
    """
    Receipts waiting for a finance decision, oldest first.

    Returns ``{"items": [...], "total": int}``.
    """
    qs = _receipt_queryset().filter(verification_status=BookingDocument.PENDING_VERIFICATION)
    qs = _apply_common_filters(qs, q=q, method=method)

    total = qs.count()
    documents = _paginate(qs.order_by("created_at", "pk"), page, page_size)
    return {"items": _build_page(documents), "total": total}


def list_payment_receipt_history(status=None, date_from=None, date_to=None, q=None, method=None, page=1, page_size=20):
    """
    Receipts that have been decided, most recently verified first.

    ``status`` narrows to a subset of verified/rejected. ``date_from`` and
    ``date_to`` bound ``verified_at``; date-only values include the whole day.
    Raises ValueError on unparseable dates.
    """
    statuses = [s for s in (status or []) if s] or HISTORY_STATUSES
    qs = _receipt_queryset().filter(verification_status__in=statuses)

    if date_from:
        start, _ = _to_bound(date_from)
        qs = qs.filter(verified_at__gte=start)
    if date_to:
        end, inclusive = _to_bound(date_to, end=True)
        qs = qs.filter(verified_at__lte=end) if inclusive else qs.filter(verified_at__lt=end)

    qs = _apply_common_filters(qs, q=q, method=method)

    total = qs.count()
    ordered = qs.order_by("-verified_at", "-created_at", "-pk")
    documents = _paginate(ordered, page, page_size)
    return {"items": _build_page(documents), "total": total}


# ============================================================
# 🔹 Payment records
# ============================================================
def record_verified_payment(document, verified_by, payment_method=None, amount=None, notes=None):
    """
    Create a verified Payment for a receipt against the booking's latest invoice
    and mark that invoice paid.

    Returns the Payment, or None when the booking has no invoice yet.
    Must run inside the caller's transaction.
    """
    booking = document.booking
    latest_form = booking.service_forms.order_by("-created_at").first()
    invoice = latest_form.invoices.order_by("-created_at").first() if latest_form else None
    if invoice is None:
        logger.info(f"Booking {booking.reference_number}: no invoice to attach receipt {document.id} to")
        return None

    metadata = get_payment_metadata(document)
    now = timezone.now()

    payment = Payment.objects.create(
        invoice=invoice,
        amount=Decimal(str(amount)) if amount not in (None, "") else booking.total_amount,
        payment_method=payment_method or metadata.get("paymentMethod") or DEFAULT_PAYMENT_METHOD,
        payment_date=now,
        receipt_file_path=document.blob.url,
        status="verified",
        uploaded_by_id=document.created_by_id,
        uploaded_at=document.created_at,
        verified_by=verified_by,
        verified_at=now,
        verification_notes=notes or None,
    )
    Invoice.objects.filter(pk=invoice.pk).update(status="paid", updated_at=now)
    logger.info(f"Invoice {invoice.invoice_number}: marked paid by payment {payment.id}")
    return payment

import uuid
from django.conf import settings
from django.db import models
from bookings.models.booking import Booking


class FileBlob(models.Model):
    """Physical file metadata for an uploaded document."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=512, unique=True)
    url = models.URLField(max_length=1024)
    mime_type = models.CharField(max_length=100)
    file_name = models.CharField(max_length=255)
    size_bytes = models.PositiveBigIntegerField(default=0)
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.file_name


class BookingDocument(models.Model):
    # Document types
    INVOICE = "invoice"
    SERVICE_FORM_UNSIGNED = "service_form_unsigned"
    SERVICE_FORM_SIGNED = "service_form_signed"
    WORKSPACE_FORM_UNSIGNED = "workspace_form_unsigned"
    WORKSPACE_FORM_SIGNED = "workspace_form_signed"
    PAYMENT_RECEIPT = "payment_receipt"
    SAMPLE_RESULT = "sample_result"

    TYPE_CHOICES = [
        (INVOICE, "Invoice"),
        (SERVICE_FORM_UNSIGNED, "Service Form (Unsigned)"),
        (SERVICE_FORM_SIGNED, "Signed Service Form"),
        (WORKSPACE_FORM_UNSIGNED, "Working Area Agreement (Unsigned)"),
        (WORKSPACE_FORM_SIGNED, "Signed Working Area Agreement"),
        (PAYMENT_RECEIPT, "Payment Receipt"),
        (SAMPLE_RESULT, "Sample Analysis Result"),
    ]

    # Verification statuses
    PENDING_UPLOAD = "pending_upload"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    REJECTED = "rejected"
    NOT_REQUIRED = "not_required"

    VERIFICATION_STATUS_CHOICES = [
        (PENDING_UPLOAD, "Pending Upload"),
        (PENDING_VERIFICATION, "Under Review"),
        (VERIFIED, "Verified"),
        (REJECTED, "Rejected"),
        (NOT_REQUIRED, "Not Required"),
    ]

    # Uploaded by the booking owner and checked by an administrator
    VERIFIABLE_TYPES = (SERVICE_FORM_SIGNED, WORKSPACE_FORM_SIGNED, PAYMENT_RECEIPT)
    USER_UPLOADABLE_TYPES = VERIFIABLE_TYPES

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="documents")
    blob = models.OneToOneField(FileBlob, on_delete=models.PROTECT, related_name="document")
    type = models.CharField(max_length=40, choices=TYPE_CHOICES, db_index=True)

    verification_status = models.CharField(
        max_length=30,
        choices=VERIFICATION_STATUS_CHOICES,
        default=PENDING_VERIFICATION,
        db_index=True,
    )
    rejection_reason = models.TextField(blank=True, null=True)
    verification_notes = models.TextField(blank=True, null=True)

    # Legacy free-text note; payment receipts used to carry their metadata here as JSON
    note = models.TextField(blank=True, null=True)
    payment_metadata = models.JSONField(blank=True, null=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="uploaded_booking_documents",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    # The verifier row may be gone while the id is kept for history
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name="verified_booking_documents",
    )
    verified_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "type", "-created_at"], name="bookingdoc_latest_idx"),
        ]

    def __str__(self):
        return f"{self.get_type_display()} ({self.booking_id}) - {self.verification_status}"

    @property
    def is_verifiable(self):
        return self.type in self.VERIFIABLE_TYPES

    @classmethod
    def type_label(cls, doc_type):
        return dict(cls.TYPE_CHOICES).get(doc_type, doc_type)

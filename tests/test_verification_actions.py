"""
Tests for document mutations: verify, reject, upload, delete and download.
"""
import uuid
from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.exceptions import ValidationError

from audit.models import AuditLog
from bookings.exceptions import DocumentNotFound, DocumentStateConflict, Forbidden
from bookings.models import BookingDocument, FileBlob
from bookings.utils import actions
from bookings.utils.actions import (
    delete_booking_document,
    record_document_download,
    reject_document,
    upload_booking_document,
    verify_document,
)
from notifications.models import Notification
from payments.models import Payment
from users.models import User

pytestmark = pytest.mark.django_db


def pdf(name="signed.pdf", size=1024, content_type="application/pdf"):
    return SimpleUploadedFile(name, b"%" * size, content_type=content_type)


# =====================================================================
# Verify
# =====================================================================
class TestVerifyDocument:
    def test_marks_document_verified(self, booking, make_document, admin_user):
        doc = make_document(booking)

        verified, payment = verify_document(doc.pk, admin_user, notes="Signatures match")

        doc.refresh_from_db()
        assert doc.verification_status == BookingDocument.VERIFIED
        assert doc.verified_by_id == admin_user.pk
        assert doc.verified_at is not None
        assert doc.verification_notes == "Signatures match"
        assert verified.verification_status == BookingDocument.VERIFIED
        assert payment is None

    def test_second_verify_conflicts(self, booking, make_document, admin_user, finance_user):
        doc = make_document(booking)
        verify_document(doc.pk, admin_user)

        with pytest.raises(DocumentStateConflict):
            verify_document(doc.pk, finance_user)

        doc.refresh_from_db()
        assert doc.verified_by_id == admin_user.pk

    def test_verify_after_reject_conflicts(self, booking, make_document, admin_user):
        doc = make_document(booking)
        reject_document(doc.pk, admin_user, "Unsigned")

        with pytest.raises(DocumentStateConflict):
            verify_document(doc.pk, admin_user)
        doc.refresh_from_db()
        assert doc.verification_status == BookingDocument.REJECTED

    def test_missing_document(self, admin_user):
        with pytest.raises(DocumentNotFound):
            verify_document(uuid.uuid4(), admin_user)

    def test_non_verifiable_type(self, booking, make_document, admin_user):
        doc = make_document(booking, doc_type=BookingDocument.SAMPLE_RESULT, status=BookingDocument.NOT_REQUIRED)
        with pytest.raises(ValidationError):
            verify_document(doc.pk, admin_user)

    def test_member_is_forbidden(self, booking, make_document, member):
        doc = make_document(booking)
        with pytest.raises(Forbidden) as excinfo:
            verify_document(doc.pk, member)
        assert str(excinfo.value.detail) == "Only administrators can perform this action."

    def test_inactive_admin_is_forbidden(self, booking, make_document, make_user):
        suspended = make_user(role=User.ROLE_LAB_ADMINISTRATOR, status="suspended")
        doc = make_document(booking)
        with pytest.raises(Forbidden):
            verify_document(doc.pk, suspended)

    def test_receipt_creates_payment_and_marks_invoice_paid(self, booking, invoice, make_document, finance_user):
        doc = make_document(
            booking,
            doc_type=BookingDocument.PAYMENT_RECEIPT,
            note='{"amount":"150.00","paymentMethod":"eft","paymentDate":"2025-03-01"}',
        )

        _, payment = verify_document(
            doc.pk, finance_user, notes="Matched bank statement",
            payment_method=Payment.METHOD_LOCAL_ORDER, amount=Decimal("200.00"),
        )

        assert payment.invoice_id == invoice.pk
        assert payment.amount == Decimal("200.00")
        assert payment.payment_method == Payment.METHOD_LOCAL_ORDER
        assert payment.status == "verified"
        assert payment.verified_by_id == finance_user.pk
        assert payment.receipt_file_path == doc.blob.url

        invoice.refresh_from_db()
        assert invoice.status == "paid"

        doc.refresh_from_db()
        assert doc.payment_metadata == {
            "amount": "200.00",
            "paymentMethod": "local_order",
            "paymentDate": "2025-03-01",
        }
        assert '"paymentMethod":"local_order"' in doc.note

    def test_receipt_without_overrides_uses_booking_total(self, booking, invoice, make_document, admin_user):
        doc = make_document(
            booking,
            doc_type=BookingDocument.PAYMENT_RECEIPT,
            payment_metadata={"paymentMethod": "vote_transfer"},
        )
        _, payment = verify_document(doc.pk, admin_user)
        assert payment.amount == booking.total_amount
        assert payment.payment_method == Payment.METHOD_VOTE_TRANSFER

    def test_receipt_without_invoice_still_verifies(self, booking, make_document, admin_user):
        doc = make_document(booking, doc_type=BookingDocument.PAYMENT_RECEIPT)
        verified, payment = verify_document(doc.pk, admin_user)
        assert verified.verification_status == BookingDocument.VERIFIED
        assert payment is None
        assert not Payment.objects.exists()

    def test_audit_and_notification_after_commit(
        self, booking, make_document, admin_user, member, django_capture_on_commit_callbacks
    ):
        doc = make_document(booking, doc_type=BookingDocument.PAYMENT_RECEIPT)

        with django_capture_on_commit_callbacks(execute=True):
            verify_document(doc.pk, admin_user, notes="ok")

        entry = AuditLog.objects.get(action="verify_payment_receipt")
        assert entry.user_id == admin_user.pk
        assert entry.entity == "BookingDocument"
        assert entry.entity_id == str(doc.pk)
        assert entry.metadata["booking_reference"] == "BR-2025-0001"
        assert entry.metadata["document_type"] == "payment_receipt"
        assert entry.metadata["notes"] == "ok"

        notification = Notification.objects.get(recipient=member)
        assert notification.event == "payment_verified"
        assert notification.message == "Your Payment Receipt for booking BR-2025-0001 has been verified."

    def test_notification_failure_does_not_fail_verify(
        self, booking, make_document, admin_user, monkeypatch, django_capture_on_commit_callbacks
    ):
        def _boom(document):
            raise RuntimeError("mail server down")

        monkeypatch.setattr("bookings.utils.actions.send_document_verified_notification", _boom)
        doc = make_document(booking)

        with django_capture_on_commit_callbacks(execute=True):
            verify_document(doc.pk, admin_user)

        doc.refresh_from_db()
        assert doc.verification_status == BookingDocument.VERIFIED
        assert AuditLog.objects.filter(action="verify_service_form_signed").exists()

    def test_no_side_effects_without_commit(self, booking, make_document, admin_user, django_capture_on_commit_callbacks):
        doc = make_document(booking)
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            verify_document(doc.pk, admin_user)
        assert callbacks
        assert not AuditLog.objects.exists()
        assert not Notification.objects.exists()


# =====================================================================
# Reject
# =====================================================================
class TestRejectDocument:
    def test_records_reason(self, booking, make_document, admin_user, member, django_capture_on_commit_callbacks):
        doc = make_document(booking, doc_type=BookingDocument.WORKSPACE_FORM_SIGNED)

        with django_capture_on_commit_callbacks(execute=True):
            rejected = reject_document(doc.pk, admin_user, "  Missing witness signature ")

        doc.refresh_from_db()
        assert doc.verification_status == BookingDocument.REJECTED
        assert doc.rejection_reason == "Missing witness signature"
        assert doc.verified_by_id == admin_user.pk
        assert rejected.rejection_reason == "Missing witness signature"

        entry = AuditLog.objects.get(action="reject_workspace_form_signed")
        assert entry.metadata["reason"] == "Missing witness signature"

        notification = Notification.objects.get(recipient=member)
        assert notification.event == "document_rejected"
        assert notification.message == (
            "Your Signed Working Area Agreement for booking BR-2025-0001 was rejected. "
            "Reason: Missing witness signature. Please upload a new document."
        )

    @pytest.mark.parametrize("reason", ["", "   ", "\n\t", None])
    def test_blank_reason_rejected_before_any_query(self, admin_user, reason, django_assert_num_queries):
        with django_assert_num_queries(0):
            with pytest.raises(ValidationError) as excinfo:
                reject_document(uuid.uuid4(), admin_user, reason)
        assert "reason" in excinfo.value.detail

    def test_reject_after_verify_conflicts(self, booking, make_document, admin_user):
        doc = make_document(booking)
        verify_document(doc.pk, admin_user)
        with pytest.raises(DocumentStateConflict):
            reject_document(doc.pk, admin_user, "Too late")

    def test_missing_document(self, admin_user):
        with pytest.raises(DocumentNotFound):
            reject_document(uuid.uuid4(), admin_user, "Wrong file")

    def test_member_is_forbidden(self, booking, make_document, member):
        doc = make_document(booking)
        with pytest.raises(Forbidden):
            reject_document(doc.pk, member, "Nope")


# =====================================================================
# Upload
# =====================================================================
class TestUploadBookingDocument:
    def test_member_uploads_signed_form(self, booking, member, fake_s3, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            doc = upload_booking_document(booking, member, BookingDocument.SERVICE_FORM_SIGNED, pdf())

        assert doc.verification_status == BookingDocument.PENDING_VERIFICATION
        assert doc.created_by_id == member.pk
        assert doc.blob.key == fake_s3.stored[0]
        assert doc.blob.key.startswith(f"booking_docs/{booking.pk}/")
        assert doc.blob.file_name == "signed.pdf"
        assert AuditLog.objects.filter(action="upload_service_form_signed", entity_id=str(doc.pk)).exists()

    def test_pending_document_blocks_reupload(self, booking, member, make_document, fake_s3):
        make_document(booking)
        with pytest.raises(DocumentStateConflict) as excinfo:
            upload_booking_document(booking, member, BookingDocument.SERVICE_FORM_SIGNED, pdf())
        assert str(excinfo.value.detail) == "A Signed Service Form is already awaiting verification."
        assert fake_s3.stored == []

    def test_verified_document_blocks_reupload(self, booking, member, make_document, fake_s3):
        make_document(booking, status=BookingDocument.VERIFIED)
        with pytest.raises(DocumentStateConflict) as excinfo:
            upload_booking_document(booking, member, BookingDocument.SERVICE_FORM_SIGNED, pdf())
        assert str(excinfo.value.detail) == "The Signed Service Form has already been verified."

    def test_reupload_after_rejection_creates_new_row(self, booking, member, make_document, fake_s3):
        rejected = make_document(booking, status=BookingDocument.REJECTED)

        doc = upload_booking_document(booking, member, BookingDocument.SERVICE_FORM_SIGNED, pdf())

        assert doc.pk != rejected.pk
        assert BookingDocument.objects.filter(booking=booking).count() == 2
        rejected.refresh_from_db()
        assert rejected.verification_status == BookingDocument.REJECTED

    def test_receipt_metadata_stored_both_ways(self, booking, member, fake_s3):
        doc = upload_booking_document(
            booking, member, BookingDocument.PAYMENT_RECEIPT, pdf("receipt.pdf"),
            payment_metadata={
                "amount": "150.00",
                "paymentMethod": "eft",
                "paymentDate": "2025-03-01",
                "referenceNumber": None,
            },
        )
        assert doc.payment_metadata == {"amount": "150.00", "paymentMethod": "eft", "paymentDate": "2025-03-01"}
        assert doc.note == '{"amount":"150.00","paymentMethod":"eft","paymentDate":"2025-03-01"}'

    def test_admin_document_is_not_required(self, booking, admin_user, fake_s3):
        doc = upload_booking_document(booking, admin_user, BookingDocument.SAMPLE_RESULT, pdf("results.pdf"))
        assert doc.verification_status == BookingDocument.NOT_REQUIRED

    def test_member_cannot_upload_admin_type(self, booking, member, fake_s3):
        with pytest.raises(Forbidden):
            upload_booking_document(booking, member, BookingDocument.INVOICE, pdf())

    def test_member_cannot_upload_to_other_booking(self, booking, other_member, fake_s3):
        with pytest.raises(Forbidden):
            upload_booking_document(booking, other_member, BookingDocument.SERVICE_FORM_SIGNED, pdf())

    def test_file_too_large(self, booking, member, fake_s3, settings):
        settings.DOCUMENT_UPLOAD_MAX_BYTES = 512
        with pytest.raises(ValidationError):
            upload_booking_document(booking, member, BookingDocument.SERVICE_FORM_SIGNED, pdf(size=1024))
        assert fake_s3.stored == []

    def test_unsupported_content_type(self, booking, member, fake_s3):
        with pytest.raises(ValidationError):
            upload_booking_document(
                booking, member, BookingDocument.SERVICE_FORM_SIGNED,
                pdf("macro.docm", content_type="application/vnd.ms-word"),
            )

    def test_upload_racing_another_is_refused_under_lock(self, booking, member, make_document, fake_s3, monkeypatch):
        store = actions.upload_to_s3

        def _upload_while_another_lands(file_obj, prefix="uploads/"):
            stored = store(file_obj, prefix)
            make_document(booking)
            return stored

        monkeypatch.setattr("bookings.utils.actions.upload_to_s3", _upload_while_another_lands)

        with pytest.raises(DocumentStateConflict):
            upload_booking_document(booking, member, BookingDocument.SERVICE_FORM_SIGNED, pdf())

        assert fake_s3.deleted == fake_s3.stored
        assert BookingDocument.objects.filter(booking=booking).count() == 1

    def test_storage_object_removed_when_insert_fails(self, booking, member, fake_s3, monkeypatch):
        def _fail(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr("bookings.utils.actions.log_audit_event", _fail)

        with pytest.raises(RuntimeError):
            upload_booking_document(booking, member, BookingDocument.SERVICE_FORM_SIGNED, pdf())

        assert fake_s3.deleted == fake_s3.stored
        assert not FileBlob.objects.exists()
        assert not BookingDocument.objects.exists()


# =====================================================================
# Delete / download
# =====================================================================
class TestDeleteBookingDocument:
    def test_owner_deletes_pending_document(
        self, booking, member, make_document, fake_s3, django_capture_on_commit_callbacks
    ):
        doc = make_document(booking)
        key = doc.blob.key

        with django_capture_on_commit_callbacks(execute=True):
            delete_booking_document(doc.pk, member)

        assert not BookingDocument.objects.filter(pk=doc.pk).exists()
        assert not FileBlob.objects.filter(key=key).exists()
        assert fake_s3.deleted == [key]
        assert AuditLog.objects.filter(action="document_deleted", entity_id=str(doc.pk)).exists()

    def test_owner_cannot_delete_verified(self, booking, member, make_document, fake_s3):
        doc = make_document(booking, status=BookingDocument.VERIFIED)
        with pytest.raises(Forbidden) as excinfo:
            delete_booking_document(doc.pk, member)
        assert str(excinfo.value.detail) == "Cannot delete a verified document"
        assert fake_s3.deleted == []

    def test_admin_deletes_verified(self, booking, admin_user, make_document, fake_s3):
        doc = make_document(booking, status=BookingDocument.VERIFIED)
        delete_booking_document(doc.pk, admin_user)
        assert not BookingDocument.objects.filter(pk=doc.pk).exists()

    def test_other_member_forbidden(self, booking, other_member, make_document, fake_s3):
        doc = make_document(booking)
        with pytest.raises(Forbidden):
            delete_booking_document(doc.pk, other_member)

    def test_missing_document(self, member, fake_s3):
        with pytest.raises(DocumentNotFound):
            delete_booking_document(uuid.uuid4(), member)

    def test_storage_kept_when_delete_does_not_commit(
        self, booking, member, make_document, fake_s3, django_capture_on_commit_callbacks
    ):
        doc = make_document(booking)

        with django_capture_on_commit_callbacks(execute=False):
            delete_booking_document(doc.pk, member)

        assert fake_s3.deleted == []


class TestRecordDocumentDownload:
    def test_owner_download_is_audited(self, booking, member, make_document, django_capture_on_commit_callbacks):
        doc = make_document(booking)
        with django_capture_on_commit_callbacks(execute=True):
            result = record_document_download(doc.pk, member)
        assert result.pk == doc.pk
        entry = AuditLog.objects.get(action="document_downloaded")
        assert entry.user_id == member.pk

    def test_other_member_forbidden(self, booking, other_member, make_document):
        doc = make_document(booking)
        with pytest.raises(Forbidden):
            record_document_download(doc.pk, other_member)

    def test_locked_result_download_is_refused(
        self, booking, member, admin_user, make_document, django_capture_on_commit_callbacks
    ):
        result = make_document(
            booking, doc_type=BookingDocument.SAMPLE_RESULT,
            status=BookingDocument.NOT_REQUIRED, created_by=admin_user,
        )

        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(Forbidden) as excinfo:
                record_document_download(result.pk, member)

        assert str(excinfo.value.detail) == (
            "Results are locked. Awaiting verification of: Signed Service Form, Payment Receipt."
        )
        assert not AuditLog.objects.exists()

    def test_result_download_allowed_once_gate_opens(self, booking, member, admin_user, make_document):
        make_document(booking, status=BookingDocument.VERIFIED)
        make_document(booking, doc_type=BookingDocument.PAYMENT_RECEIPT, status=BookingDocument.VERIFIED)
        result = make_document(
            booking, doc_type=BookingDocument.SAMPLE_RESULT,
            status=BookingDocument.NOT_REQUIRED, created_by=admin_user,
        )

        assert record_document_download(result.pk, member).pk == result.pk

    def test_admin_result_download_is_not_gated(self, booking, admin_user, make_document):
        result = make_document(
            booking, doc_type=BookingDocument.SAMPLE_RESULT,
            status=BookingDocument.NOT_REQUIRED, created_by=admin_user,
        )
        assert record_document_download(result.pk, admin_user).pk == result.pk

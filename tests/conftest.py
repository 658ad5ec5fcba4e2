"""
Shared pytest fixtures: users by role, bookings, documents and an API client.
"""
import itertools
import uuid
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from bookings.models import Booking, BookingDocument, FileBlob, ServiceForm, WorkspaceBooking
from payments.models import Invoice
from users.models import User

_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def _sync_audit(settings):
    # Write audit rows inline so tests can assert on them
    settings.AUDIT_LOG_ASYNC = False


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


# ---------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------
@pytest.fixture
def make_user(db):
    def _make(role=User.ROLE_MEMBER, status=User.STATUS_ACTIVE, **extra):
        n = next(_counter)
        extra.setdefault("email", f"user{n}@example.com")
        extra.setdefault("first_name", f"First{n}")
        extra.setdefault("last_name", f"Last{n}")
        return User.objects.create_user(role=role, status=status, **extra)
    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user(role=User.ROLE_LAB_ADMINISTRATOR, first_name="Aisyah", last_name="Admin")


@pytest.fixture
def finance_user(make_user):
    return make_user(role=User.ROLE_FINANCE, first_name="Farid", last_name="Finance")


@pytest.fixture
def member(make_user):
    return make_user(first_name="Mei", last_name="Member", email="mei.member@example.com")


@pytest.fixture
def other_member(make_user):
    return make_user(first_name="Omar", last_name="Other")


# ---------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------
@pytest.fixture
def make_booking(db):
    def _make(user, reference_number=None, total_amount=Decimal("150.00"), with_workspace=False):
        booking = Booking.objects.create(
            reference_number=reference_number or f"BR-2025-{next(_counter):04d}",
            user=user,
            total_amount=total_amount,
            status="approved",
        )
        if with_workspace:
            today = timezone.now().date()
            WorkspaceBooking.objects.create(booking=booking, start_date=today, end_date=today)
        return booking
    return _make


@pytest.fixture
def booking(make_booking, member):
    return make_booking(member, reference_number="BR-2025-0001")


@pytest.fixture
def invoice(booking):
    form = ServiceForm.objects.create(booking=booking, form_number="SF-2025-0001")
    return Invoice.objects.create(service_form=form, invoice_number="INV-2025-0001", amount=Decimal("150.00"))


# ---------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------
@pytest.fixture
def make_document(db):
    def _make(
        booking,
        doc_type=BookingDocument.SERVICE_FORM_SIGNED,
        status=BookingDocument.PENDING_VERIFICATION,
        created_by=None,
        note=None,
        payment_metadata=None,
        created_at=None,
        **extra,
    ):
        created_by = created_by or booking.user
        key = f"booking_docs/{booking.pk}/{uuid.uuid4()}_{doc_type}.pdf"
        blob = FileBlob.objects.create(
            key=key,
            url=f"https://checa-booking-docs.s3.ap-southeast-1.amazonaws.com/{key}",
            mime_type="application/pdf",
            file_name=f"{doc_type}.pdf",
            size_bytes=2048,
            uploaded_by=created_by,
        )
        document = BookingDocument.objects.create(
            booking=booking,
            blob=blob,
            type=doc_type,
            verification_status=status,
            note=note,
            payment_metadata=payment_metadata,
            created_by=created_by,
            **extra,
        )
        if created_at is not None:
            # created_at is auto_now_add; backdate after insert
            BookingDocument.objects.filter(pk=document.pk).update(created_at=created_at)
            document.refresh_from_db()
        return document
    return _make


# ---------------------------------------------------------------------
# API
# ---------------------------------------------------------------------
@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _login(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _login


# ---------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------
@pytest.fixture
def fake_s3(monkeypatch):
    """Replace S3 calls made by document actions; records stored and deleted keys."""
    calls = SimpleNamespace(stored=[], deleted=[])

    def _upload(file_obj, prefix="uploads/"):
        key = f"{prefix}{uuid.uuid4()}_{file_obj.name}"
        calls.stored.append(key)
        return {
            "key": key,
            "url": f"https://checa-booking-docs.s3.ap-southeast-1.amazonaws.com/{key}",
            "mime_type": file_obj.content_type,
            "file_name": file_obj.name,
            "size_bytes": file_obj.size,
        }

    def _delete(key):
        calls.deleted.append(key)
        return True

    monkeypatch.setattr("bookings.utils.actions.upload_to_s3", _upload)
    monkeypatch.setattr("bookings.utils.actions.delete_from_s3", _delete)
    return calls

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("reference_number", models.CharField(help_text="Human-readable reference (e.g., BR-2025-0001)", max_length=30, unique=True)),
                ("project_description", models.TextField(blank=True, null=True)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("pending_user_verification", "Pending User Verification"), ("pending_approval", "Pending Approval"), ("revision_requested", "Revision Requested"), ("approved", "Approved"), ("in_progress", "In Progress"), ("completed", "Completed"), ("rejected", "Rejected"), ("cancelled", "Cancelled")], default="draft", max_length=30)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="FileBlob",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("key", models.CharField(max_length=512, unique=True)),
                ("url", models.URLField(max_length=1024)),
                ("mime_type", models.CharField(max_length=100)),
                ("file_name", models.CharField(max_length=255)),
                ("size_bytes", models.PositiveBigIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("uploaded_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="ServiceForm",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("form_number", models.CharField(max_length=50, unique=True)),
                ("requires_working_area_agreement", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("booking", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="service_forms", to="bookings.booking")),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="WorkspaceBooking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("booking", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="workspace_bookings", to="bookings.booking")),
            ],
        ),
        migrations.CreateModel(
            name="BookingDocument",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("type", models.CharField(choices=[("invoice", "Invoice"), ("service_form_unsigned", "Service Form (Unsigned)"), ("service_form_signed", "Signed Service Form"), ("workspace_form_unsigned", "Working Area Agreement (Unsigned)"), ("workspace_form_signed", "Signed Working Area Agreement"), ("payment_receipt", "Payment Receipt"), ("sample_result", "Sample Analysis Result")], db_index=True, max_length=40)),
                ("verification_status", models.CharField(choices=[("pending_upload", "Pending Upload"), ("pending_verification", "Under Review"), ("verified", "Verified"), ("rejected", "Rejected"), ("not_required", "Not Required")], db_index=True, default="pending_verification", max_length=30)),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("verification_notes", models.TextField(blank=True, null=True)),
                ("note", models.TextField(blank=True, null=True)),
                ("payment_metadata", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("blob", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="document", to="bookings.fileblob")),
                ("booking", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="documents", to="bookings.booking")),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="uploaded_booking_documents", to=settings.AUTH_USER_MODEL)),
                ("verified_by", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name="verified_booking_documents", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["booking", "type", "-created_at"], name="bookingdoc_latest_idx")],
            },
        ),
    ]

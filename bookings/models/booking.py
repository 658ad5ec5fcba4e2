import uuid
from decimal import Decimal
from django.db import models
from django.conf import settings


class Booking(models.Model):
    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("pending_user_verification", "Pending User Verification"),
        ("pending_approval", "Pending Approval"),
        ("revision_requested", "Revision Requested"),
        ("approved", "Approved"),
        ("in_progress", "In Progress"),
        ("completed", "Completed"),
        ("rejected", "Rejected"),
        ("cancelled", "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    reference_number = models.CharField(
        max_length=30,
        unique=True,
        help_text="Human-readable reference (e.g., BR-2025-0001)"
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings"
    )

    project_description = models.TextField(blank=True, null=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default="draft")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Booking {self.reference_number} ({self.user})"

    @property
    def requires_workspace_form(self):
        return self.workspace_bookings.exists()


class WorkspaceBooking(models.Model):
    """Workspace rental attached to a booking; its presence requires a signed working-area agreement."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="workspace_bookings")
    start_date = models.DateField()
    end_date = models.DateField()
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Workspace {self.start_date} → {self.end_date} ({self.booking.reference_number})"


class ServiceForm(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="service_forms")
    form_number = models.CharField(max_length=50, unique=True)
    requires_working_area_agreement = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.form_number} ({self.booking.reference_number})"

from django.db import models
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.conf import settings


class Notification(models.Model):
    NOTIFICATION_TYPES = [
        ("in_app", "In-App"),
        ("email", "Email"),
    ]

    EVENT_CHOICES = [
        ("forms_signed_verified", "Signed Form Verified"),
        ("payment_verified", "Payment Verified"),
        ("document_rejected", "Document Rejected"),
        ("process_complete", "Process Complete"),
    ]

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("sent", "Sent"),
        ("failed", "Failed"),
    ]

    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    notification_type = models.CharField(max_length=20, choices=NOTIFICATION_TYPES, default="in_app")
    event = models.CharField(max_length=40, choices=EVENT_CHOICES, default="process_complete")
    subject = models.CharField(max_length=255, blank=True, null=True)
    message = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    is_read = models.BooleanField(default=False)
    error_message = models.TextField(blank=True, null=True)

    # Generic relation to any object (booking, document, etc.)
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE, null=True, blank=True)
    object_id = models.CharField(max_length=64, null=True, blank=True)
    content_object = GenericForeignKey("content_type", "object_id")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.notification_type} to {self.recipient} ({self.status})"

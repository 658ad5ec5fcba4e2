from rest_framework import serializers
from django.conf import settings

from .models import Booking, BookingDocument, FileBlob
from payments.models import Payment
from users.models import User


# -------------------------
# Blob / Document Serializers
# -------------------------
class FileBlobSerializer(serializers.ModelSerializer):
    class Meta:
        model = FileBlob
        fields = ["id", "key", "url", "mime_type", "file_name", "size_bytes", "created_at"]
        read_only_fields = fields


class BookingDocumentSerializer(serializers.ModelSerializer):
    blob = FileBlobSerializer(read_only=True)
    type_label = serializers.SerializerMethodField()
    booking_ref = serializers.CharField(source="booking.reference_number", read_only=True)
    created_by = serializers.SerializerMethodField()
    verified_by = serializers.SerializerMethodField()

    class Meta:
        model = BookingDocument
        fields = [
            "id",
            "booking",
            "booking_ref",
            "type",
            "type_label",
            "note",
            "payment_metadata",
            "verification_status",
            "rejection_reason",
            "verification_notes",
            "verified_at",
            "verified_by",
            "created_at",
            "created_by",
            "blob",
        ]
        read_only_fields = fields

    def get_type_label(self, obj):
        return obj.get_type_display()

    def _user_ref(self, user):
        return {
            "id": user.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
        }

    def get_created_by(self, obj):
        return self._user_ref(obj.created_by)

    def get_verified_by(self, obj):
        if not obj.verified_by_id:
            return None
        # verified_by has no FK constraint; the user row may be gone
        try:
            user = obj.verified_by
        except User.DoesNotExist:
            user = None
        if user is None:
            return {"id": obj.verified_by_id, "first_name": "Unknown", "last_name": ""}
        return self._user_ref(user)


# -------------------------
# Input Serializers
# -------------------------
class BookingDocumentUploadSerializer(serializers.Serializer):
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.all())
    type = serializers.ChoiceField(choices=BookingDocument.TYPE_CHOICES)
    file = serializers.FileField()
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    # Payment receipt details
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=Payment.PAYMENT_METHODS, required=False, allow_null=True)
    payment_date = serializers.DateField(required=False, allow_null=True)
    reference_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)

    def validate_file(self, value):
        max_bytes = settings.DOCUMENT_UPLOAD_MAX_BYTES
        if value.size > max_bytes:
            raise serializers.ValidationError(f"File exceeds the {max_bytes // (1024 * 1024)}MB limit.")
        if value.content_type not in settings.DOCUMENT_UPLOAD_ALLOWED_TYPES:
            raise serializers.ValidationError(f"Unsupported file type '{value.content_type}'.")
        return value

    def payment_metadata(self):
        data = self.validated_data
        return {
            "amount": str(data["amount"]) if data.get("amount") is not None else None,
            "paymentMethod": data.get("payment_method"),
            "paymentDate": data["payment_date"].isoformat() if data.get("payment_date") else None,
            "referenceNumber": data.get("reference_number"),
        }


class VerifyDocumentSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    payment_method = serializers.ChoiceField(choices=Payment.PAYMENT_METHODS, required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class RejectDocumentSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, trim_whitespace=True)

    def validate_reason(self, value):
        if not value.strip():
            raise serializers.ValidationError("Rejection reason is required.")
        return value.strip()


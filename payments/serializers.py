# payments/serializers.py
from rest_framework import serializers
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "invoice",
            "invoice_number",
            "amount",
            "payment_method",
            "payment_date",
            "status",
            "receipt_file_path",
            "uploaded_by",
            "uploaded_at",
            "verified_by",
            "verified_at",
            "verification_notes",
        ]
        read_only_fields = fields


class PaymentReceiptQuerySerializer(serializers.Serializer):
    """Query parameters shared by the pending and history receipt queues."""

    q = serializers.CharField(required=False, allow_blank=True)
    method = serializers.ChoiceField(choices=Payment.PAYMENT_METHODS, required=False)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    page_size = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)


class PaymentReceiptHistoryQuerySerializer(PaymentReceiptQuerySerializer):
    status = serializers.ListField(
        child=serializers.ChoiceField(choices=["verified", "rejected"]),
        required=False,
    )
    date_from = serializers.CharField(required=False, allow_blank=True)
    date_to = serializers.CharField(required=False, allow_blank=True)

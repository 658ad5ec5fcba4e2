# payments/views.py
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from checa.permissions import IsLabAdministrator
from payments.serializers import PaymentReceiptHistoryQuerySerializer, PaymentReceiptQuerySerializer
from payments.utils import list_payment_receipt_history, list_pending_payment_receipts


def _query_data(request, list_fields=()):
    """Flatten query params; list fields accept repeated or comma separated values."""
    params = request.query_params
    data = {key: params.get(key) for key in params.keys() if key not in list_fields}
    for key in list_fields:
        values = [v.strip() for raw in params.getlist(key) for v in raw.split(",") if v.strip()]
        if values:
            data[key] = values
    return data


def _paged_response(result, page, page_size):
    return Response({
        "items": result["items"],
        "total": result["total"],
        "page": page,
        "page_size": page_size,
    })


class PendingPaymentReceiptsView(APIView):
    """
    GET /api/admin/finance/payment-receipts/pending/
    Receipts awaiting verification, oldest first.
    Query: q, method, page, page_size
    """
    permission_classes = [IsLabAdministrator]

    def get(self, request):
        serializer = PaymentReceiptQuerySerializer(data=_query_data(request))
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        result = list_pending_payment_receipts(
            q=params.get("q"),
            method=params.get("method"),
            page=params["page"],
            page_size=params["page_size"],
        )
        return _paged_response(result, params["page"], params["page_size"])


class PaymentReceiptHistoryView(APIView):
    """
    GET /api/admin/finance/payment-receipts/history/
    Verified / rejected receipts, most recently decided first.
    Query: status (repeatable), date_from, date_to, q, method, page, page_size
    """
    permission_classes = [IsLabAdministrator]

    def get(self, request):
        serializer = PaymentReceiptHistoryQuerySerializer(data=_query_data(request, list_fields=("status",)))
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        try:
            result = list_payment_receipt_history(
                status=params.get("status"),
                date_from=params.get("date_from") or None,
                date_to=params.get("date_to") or None,
                q=params.get("q"),
                method=params.get("method"),
                page=params["page"],
                page_size=params["page_size"],
            )
        except ValueError as e:
            raise ValidationError({"date": [str(e)]})
        return _paged_response(result, params["page"], params["page_size"])

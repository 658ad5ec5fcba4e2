# payments/urls.py
from django.urls import path

from .views import PaymentReceiptHistoryView, PendingPaymentReceiptsView

urlpatterns = [
    path(
        "admin/finance/payment-receipts/pending/",
        PendingPaymentReceiptsView.as_view(),
        name="payment-receipts-pending",
    ),
    path(
        "admin/finance/payment-receipts/history/",
        PaymentReceiptHistoryView.as_view(),
        name="payment-receipts-history",
    ),
]

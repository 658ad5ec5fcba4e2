# payments/admin.py
from django.contrib import admin
from .models import Invoice, Payment


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "service_form", "amount", "status", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("invoice_number", "service_form__form_number", "service_form__booking__reference_number")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "invoice", "amount", "payment_method", "status", "verified_at", "created_at")
    list_filter = ("status", "payment_method", "created_at")
    search_fields = ("invoice__invoice_number", "uploaded_by__email", "verified_by__email")

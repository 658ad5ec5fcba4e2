from django.contrib import admin
from .models import Booking, WorkspaceBooking, ServiceForm, BookingDocument, FileBlob


class WorkspaceBookingInline(admin.TabularInline):
    model = WorkspaceBooking
    extra = 0


class ServiceFormInline(admin.TabularInline):
    model = ServiceForm
    extra = 0
    readonly_fields = ("created_at",)


class BookingDocumentInline(admin.TabularInline):
    model = BookingDocument
    fk_name = "booking"
    extra = 0
    fields = ("type", "verification_status", "created_by", "verified_at", "created_at")
    readonly_fields = ("type", "verification_status", "created_by", "verified_at", "created_at")
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("reference_number", "user", "status", "total_amount", "created_at")
    search_fields = ("reference_number", "user__email", "user__first_name", "user__last_name")
    list_filter = ("status", "created_at")
    inlines = [WorkspaceBookingInline, ServiceFormInline, BookingDocumentInline]


@admin.register(ServiceForm)
class ServiceFormAdmin(admin.ModelAdmin):
    list_display = ("form_number", "booking", "requires_working_area_agreement", "created_at")
    search_fields = ("form_number", "booking__reference_number")


@admin.register(BookingDocument)
class BookingDocumentAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "type", "verification_status", "created_by", "verified_at", "created_at")
    search_fields = ("booking__reference_number", "created_by__email", "blob__file_name")
    list_filter = ("type", "verification_status", "created_at")
    readonly_fields = ("verified_by", "verified_at", "created_at")
    raw_id_fields = ("booking", "blob", "created_by")


@admin.register(FileBlob)
class FileBlobAdmin(admin.ModelAdmin):
    list_display = ("file_name", "mime_type", "size_bytes", "uploaded_by", "created_at")
    search_fields = ("file_name", "key")

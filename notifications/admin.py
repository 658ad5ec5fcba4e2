# notification/admin.py
from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("notification_type", "event", "recipient", "status", "is_read", "created_at", "subject")
    search_fields = ("recipient__email", "recipient__first_name", "recipient__last_name", "message", "error_message")
    list_filter = ("notification_type", "event", "status", "is_read", "created_at")
    readonly_fields = ("created_at", "updated_at", "error_message")

    def has_add_permission(self, request):
        # Prevent adding notifications manually (system generated only)
        return False

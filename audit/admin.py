from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "entity", "entity_id", "user", "created_at")
    search_fields = ("action", "entity", "entity_id", "user__email")
    list_filter = ("entity", "action", "created_at")
    readonly_fields = ("id", "user", "action", "entity", "entity_id", "metadata", "created_at")

    def has_add_permission(self, request):
        # Audit rows are system generated only
        return False

    def has_change_permission(self, request, obj=None):
        return False

from django.contrib import admin
from .models import FacilityDocumentConfig


@admin.register(FacilityDocumentConfig)
class FacilityDocumentConfigAdmin(admin.ModelAdmin):
    list_display = ("staff_pic_full_name", "ikohza_head_name", "updated_by", "updated_at")
    readonly_fields = ("updated_by", "updated_at")

    def has_add_permission(self, request):
        return not FacilityDocumentConfig.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False

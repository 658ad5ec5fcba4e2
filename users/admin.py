from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Faculty, Department, Ikohza, Company, CompanyBranch


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    model = User

    # --------------------------------------------------
    # LIST PAGE
    # --------------------------------------------------
    list_display = (
        "id",
        "email",
        "first_name",
        "last_name",
        "role",
        "user_type",
        "status",
        "is_active",
        "created_at",
    )

    list_filter = (
        "role",
        "user_type",
        "status",
        "is_active",
    )

    search_fields = (
        "email",
        "first_name",
        "last_name",
    )

    ordering = ("-created_at",)

    # --------------------------------------------------
    # EDIT PAGE
    # --------------------------------------------------
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Personal Information", {"fields": ("first_name", "last_name", "phone")}),
        ("Role & Status", {"fields": ("role", "user_type", "status")}),
        (
            "Organisation",
            {"fields": ("faculty", "department", "ikohza", "company", "company_branch")},
        ),
        (
            "Permissions",
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "role", "user_type", "status"),
            },
        ),
    )

    filter_horizontal = ("groups", "user_permissions")
    readonly_fields = ("created_at", "updated_at")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("faculty", "department", "ikohza", "company", "company_branch")


@admin.register(Faculty)
class FacultyAdmin(admin.ModelAdmin):
    list_display = ("name", "code")
    search_fields = ("name", "code")


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "faculty")
    search_fields = ("name",)
    list_filter = ("faculty",)


@admin.register(Ikohza)
class IkohzaAdmin(admin.ModelAdmin):
    list_display = ("name", "faculty")
    search_fields = ("name",)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "registration_number")
    search_fields = ("name", "registration_number")


@admin.register(CompanyBranch)
class CompanyBranchAdmin(admin.ModelAdmin):
    list_display = ("name", "company")
    search_fields = ("name", "company__name")

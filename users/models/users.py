from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models

from users.models.organization import Faculty, Department, Ikohza, Company, CompanyBranch


# -----------------------------
# Custom User Manager
# -----------------------------
class UserManager(BaseUserManager):
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Email is required")

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.ROLE_LAB_ADMINISTRATOR)
        extra_fields.setdefault("status", User.STATUS_ACTIVE)
        return self.create_user(email, password, **extra_fields)


# -----------------------------
# User Model
# -----------------------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_LAB_ADMINISTRATOR = "lab_administrator"
    ROLE_FINANCE = "finance"
    ROLE_MEMBER = "member"

    ROLE_CHOICES = [
        (ROLE_LAB_ADMINISTRATOR, "Lab Administrator"),
        (ROLE_FINANCE, "Finance Officer"),
        (ROLE_MEMBER, "Member"),
    ]

    # Roles allowed to verify documents and read the finance queues
    ADMIN_ROLES = (ROLE_LAB_ADMINISTRATOR, ROLE_FINANCE)

    USER_TYPE_INTERNAL = "internal_member"
    USER_TYPE_EXTERNAL = "external_member"

    USER_TYPE_CHOICES = [
        (USER_TYPE_INTERNAL, "Internal (University)"),
        (USER_TYPE_EXTERNAL, "External (Industry)"),
    ]

    STATUS_ACTIVE = "active"

    STATUS_CHOICES = [
        ("pending", "Pending"),
        (STATUS_ACTIVE, "Active"),
        ("inactive", "Inactive"),
        ("rejected", "Rejected"),
        ("suspended", "Suspended"),
    ]

    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=100, blank=True, default="")
    last_name = models.CharField(max_length=100, blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, null=True)

    role = models.CharField(max_length=30, choices=ROLE_CHOICES, default=ROLE_MEMBER, db_index=True)
    user_type = models.CharField(max_length=30, choices=USER_TYPE_CHOICES, default=USER_TYPE_INTERNAL)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending", db_index=True)

    # 🏫 Institutional members
    faculty = models.ForeignKey(Faculty, on_delete=models.SET_NULL, null=True, blank=True, related_name="users")
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name="users")
    ikohza = models.ForeignKey(Ikohza, on_delete=models.SET_NULL, null=True, blank=True, related_name="users")

    # 🏢 External members
    company = models.ForeignKey(Company, on_delete=models.SET_NULL, null=True, blank=True, related_name="users")
    company_branch = models.ForeignKey(CompanyBranch, on_delete=models.SET_NULL, null=True, blank=True, related_name="users")

    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    def __str__(self):
        return f"{self.full_name or self.email} ({self.get_role_display()})"

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_lab_admin(self):
        return self.role in self.ADMIN_ROLES

    @property
    def is_account_active(self):
        return self.is_active and self.status == self.STATUS_ACTIVE

    @property
    def is_external(self):
        return self.user_type == self.USER_TYPE_EXTERNAL

    @property
    def organization_name(self):
        """
        Display name of the user's organisation.

        External users: company, then branch.
        Institutional users: ikohza, faculty, department (first one set wins).
        """
        if self.is_external:
            candidates = (self.company, self.company_branch)
        else:
            candidates = (self.ikohza, self.faculty, self.department)

        for org in candidates:
            if org is not None:
                return org.name
        return None

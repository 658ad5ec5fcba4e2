from rest_framework import permissions


class IsActiveAccount(permissions.BasePermission):
    """
    Authenticated user whose account status is ``active``.
    """
    message = "Your account is not active."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_account_active)


class IsLabAdministrator(IsActiveAccount):
    """
    Active lab administrator or finance officer.
    Required for verification, finance and settings endpoints.
    """
    message = "Only administrators can perform this action."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            self.message = IsActiveAccount.message
            return False
        self.message = IsLabAdministrator.message
        return request.user.is_lab_admin

from rest_framework import viewsets, filters

from checa.pagination import StandardResultsSetPagination
from checa.permissions import IsLabAdministrator
from .models import AuditLog
from .serializers import AuditLogSerializer


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Admin listing of audit events.
    Supports:
    - Filtering by entity, entity_id, action and user
    - Search by action, entity id and user email
    """
    queryset = AuditLog.objects.select_related("user")
    serializer_class = AuditLogSerializer
    permission_classes = [IsLabAdministrator]
    pagination_class = StandardResultsSetPagination
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]

    search_fields = ["action", "entity", "entity_id", "user__email", "user__first_name", "user__last_name"]
    ordering_fields = ["created_at", "action"]

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params

        for field in ("entity", "entity_id", "action"):
            value = params.get(field)
            if value:
                qs = qs.filter(**{field: value})

        user_id = params.get("user")
        if user_id:
            qs = qs.filter(user_id=user_id)

        return qs.order_by("-created_at")

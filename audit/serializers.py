from rest_framework import serializers
from users.serializers import UserMiniSerializer
from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    user_detail = UserMiniSerializer(source="user", read_only=True)

    class Meta:
        model = AuditLog
        fields = ["id", "user", "user_detail", "action", "entity", "entity_id", "metadata", "created_at"]
        read_only_fields = fields

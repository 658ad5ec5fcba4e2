from rest_framework import serializers
from .models import User


class UserMiniSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "name", "email")

    def get_name(self, obj):
        return obj.full_name or obj.email

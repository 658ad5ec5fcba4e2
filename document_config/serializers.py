from rest_framework import serializers

from bookings.models import FileBlob
from .models import FacilityDocumentConfig


class SignatureBlobField(serializers.PrimaryKeyRelatedField):
    def __init__(self, **kwargs):
        kwargs.setdefault("queryset", FileBlob.objects.all())
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_null", True)
        kwargs.setdefault("pk_field", serializers.UUIDField())
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        blob = super().to_internal_value(data)
        if not (blob.mime_type or "").startswith("image/"):
            raise serializers.ValidationError("Signature must be an image file.")
        return blob


class StaffPicSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255, required=False)
    title = serializers.CharField(max_length=255, required=False)
    signature_blob_id = SignatureBlobField()


class IkohzaHeadSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    title = serializers.CharField(max_length=255, required=False)
    department = serializers.CharField(max_length=255, required=False)
    institute = serializers.CharField(max_length=255, required=False)
    university = serializers.CharField(max_length=255, required=False)
    address = serializers.CharField(required=False)
    signature_blob_id = SignatureBlobField()


# Payload key -> model field, per signature block
FIELD_MAP = {
    "staff_pic": {
        "full_name": "staff_pic_full_name",
        "title": "staff_pic_title",
        "signature_blob_id": "staff_pic_signature",
    },
    "ikohza_head": {
        "name": "ikohza_head_name",
        "title": "ikohza_head_title",
        "department": "ikohza_head_department",
        "institute": "ikohza_head_institute",
        "university": "ikohza_head_university",
        "address": "ikohza_head_address",
        "signature_blob_id": "ikohza_head_signature",
    },
}


class SignatureSettingsSerializer(serializers.Serializer):
    """
    Nested view of the signature blocks on FacilityDocumentConfig.

    Updates merge: blocks and keys left out of the payload keep their value.
    """
    staff_pic = StaffPicSerializer(required=False)
    ikohza_head = IkohzaHeadSerializer(required=False)

    def to_representation(self, instance):
        data = {}
        for block, mapping in FIELD_MAP.items():
            data[block] = {}
            for key, field in mapping.items():
                if key == "signature_blob_id":
                    blob = getattr(instance, field)
                    data[block]["signature_blob_id"] = str(blob.pk) if blob else None
                    data[block]["signature_image_url"] = blob.url if blob else None
                else:
                    data[block][key] = getattr(instance, field)
        return data

    def update(self, instance, validated_data):
        changes = {}
        for block, mapping in FIELD_MAP.items():
            for key, value in (validated_data.get(block) or {}).items():
                field = mapping[key]
                old = getattr(instance, field)
                if old != value:
                    changes[f"{block}.{key}"] = {
                        "from": str(old.pk) if isinstance(old, FileBlob) else old,
                        "to": str(value.pk) if isinstance(value, FileBlob) else value,
                    }
                    setattr(instance, field, value)

        user = self.context.get("user")
        if changes:
            instance.updated_by = user
            instance.save()
        self.changes = changes
        return instance

from django.conf import settings
from django.db import models

from bookings.models import FileBlob


class FacilityDocumentConfig(models.Model):
    """
    Single row holding the signature blocks printed on generated forms.
    Always accessed through ``FacilityDocumentConfig.load()``.
    """

    SINGLETON_KEY = "default"

    singleton_key = models.CharField(max_length=20, unique=True, default=SINGLETON_KEY, editable=False)

    # 🧑‍🔬 Staff person-in-charge
    staff_pic_full_name = models.CharField(max_length=255, blank=True, default="")
    staff_pic_title = models.CharField(max_length=255, blank=True, default="")
    staff_pic_signature = models.ForeignKey(
        FileBlob, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    # 🏛️ iKohza head
    ikohza_head_name = models.CharField(max_length=255, blank=True, default="")
    ikohza_head_title = models.CharField(max_length=255, blank=True, default="")
    ikohza_head_department = models.CharField(max_length=255, blank=True, default="")
    ikohza_head_institute = models.CharField(max_length=255, blank=True, default="")
    ikohza_head_university = models.CharField(max_length=255, blank=True, default="")
    ikohza_head_address = models.TextField(blank=True, default="")
    ikohza_head_signature = models.ForeignKey(
        FileBlob, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "facility document config"
        verbose_name_plural = "facility document config"

    def __str__(self):
        return "Facility document configuration"

    @classmethod
    def load(cls):
        defaults = getattr(settings, "FACILITY_DOCUMENT_DEFAULTS", {})
        config, _ = cls.objects.select_related("staff_pic_signature", "ikohza_head_signature").get_or_create(
            singleton_key=cls.SINGLETON_KEY,
            defaults=defaults,
        )
        return config

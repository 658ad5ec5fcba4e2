from django.apps import AppConfig


class DocumentConfigConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "document_config"

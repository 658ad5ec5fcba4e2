from django.urls import path

from document_config.views import SignatureSettingsView

urlpatterns = [
    path("admin/settings/signatures/", SignatureSettingsView.as_view(), name="signature-settings"),
]

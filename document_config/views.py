import logging

from rest_framework.response import Response
from rest_framework.views import APIView

from audit.utils import log_audit_event
from checa.permissions import IsLabAdministrator
from .models import FacilityDocumentConfig
from .serializers import SignatureSettingsSerializer

logger = logging.getLogger(__name__)


class SignatureSettingsView(APIView):
    """
    GET         /api/admin/settings/signatures/  → signature blocks
    PUT / PATCH /api/admin/settings/signatures/  → merge and save, audited
    """
    permission_classes = [IsLabAdministrator]

    def get(self, request):
        config = FacilityDocumentConfig.load()
        return Response(SignatureSettingsSerializer(config).data)

    def put(self, request):
        config = FacilityDocumentConfig.load()
        serializer = SignatureSettingsSerializer(config, data=request.data, partial=True, context={"user": request.user})
        serializer.is_valid(raise_exception=True)
        config = serializer.save()

        if serializer.changes:
            log_audit_event(
                request.user.pk,
                "update_signature_settings",
                "FacilityDocumentConfig",
                config.pk,
                {"changes": serializer.changes},
            )
            logger.info(f"Signature settings updated by user {request.user.pk}: {sorted(serializer.changes)}")

        return Response(SignatureSettingsSerializer(config).data)

    def patch(self, request):
        return self.put(request)

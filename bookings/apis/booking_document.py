# bookings/apis/booking_document.py
import uuid

from django.http import HttpResponseRedirect
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from checa.permissions import IsActiveAccount, IsLabAdministrator
from bookings.exceptions import Forbidden
from bookings.models import Booking, BookingDocument
from bookings.serializers import (
    BookingDocumentSerializer,
    BookingDocumentUploadSerializer,
    RejectDocumentSerializer,
    VerifyDocumentSerializer,
)
from bookings.utils.actions import (
    delete_booking_document,
    record_document_download,
    reject_document,
    upload_booking_document,
    verify_document,
)
from bookings.utils.documents import get_latest_documents_by_type, get_pending_verification_documents
from bookings.utils.verification import compute_download_eligibility, get_document_verification_state
from payments.serializers import PaymentSerializer

UUID_REGEX = r"[0-9a-fA-F-]{32,36}"


def _parse_uuid(value, field):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError({field: [f"'{value}' is not a valid id."]})


class BookingDocumentViewSet(viewsets.ModelViewSet):
    """
    Booking documents.

    - GET    /api/booking-docs/?booking=<id>&type=<t>            → list
    - POST   /api/booking-docs/                                   → multipart upload
    - GET    /api/booking-docs/<id>/                              → retrieve
    - DELETE /api/booking-docs/<id>/                              → delete
    - GET    /api/booking-docs/<id>/download/                     → redirect to file
    - POST   /api/booking-docs/<id>/verify/                       → admin verify
    - POST   /api/booking-docs/<id>/reject/                       → admin reject
    - GET    /api/booking-docs/pending/                           → admin queue, oldest first
    - GET    /api/booking-docs/booking/<booking_id>/latest/              → newest per type
    - GET    /api/booking-docs/booking/<booking_id>/verification-state/  → download gate

    Members only see documents of their own bookings.
    """
    queryset = BookingDocument.objects.select_related("blob", "booking", "created_by", "verified_by")
    serializer_class = BookingDocumentSerializer
    permission_classes = [IsActiveAccount]
    parser_classes = (MultiPartParser, FormParser, JSONParser)
    http_method_names = ["get", "post", "delete", "head", "options"]
    lookup_value_regex = UUID_REGEX

    def get_permissions(self):
        if self.action in ("verify", "reject", "pending"):
            return [IsLabAdministrator()]
        return super().get_permissions()

    def get_queryset(self):
        qs = super().get_queryset()
        user = self.request.user
        if not user.is_lab_admin:
            qs = qs.filter(booking__user=user)

        booking_id = self.request.query_params.get("booking")
        doc_type = self.request.query_params.get("type")
        if booking_id:
            qs = qs.filter(booking_id=_parse_uuid(booking_id, "booking"))
        if doc_type:
            qs = qs.filter(type=doc_type)
        return qs.order_by("-created_at", "-pk")

    # ------------------------------
    # Upload / delete
    # ------------------------------
    def create(self, request, *args, **kwargs):
        serializer = BookingDocumentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        document = upload_booking_document(
            booking=data["booking"],
            user=request.user,
            doc_type=data["type"],
            file_obj=data["file"],
            note=data.get("note"),
            payment_metadata=serializer.payment_metadata(),
        )
        return Response(BookingDocumentSerializer(document).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None, *args, **kwargs):
        delete_booking_document(_parse_uuid(pk, "id"), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def download(self, request, pk=None):
        document = record_document_download(_parse_uuid(pk, "id"), request.user)
        return HttpResponseRedirect(document.blob.url)

    # ------------------------------
    # Verification
    # ------------------------------
    @action(detail=True, methods=["post"])
    def verify(self, request, pk=None):
        serializer = VerifyDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        document, payment = verify_document(
            _parse_uuid(pk, "id"),
            request.user,
            notes=data.get("notes"),
            payment_method=data.get("payment_method"),
            amount=data.get("amount"),
        )
        return Response({
            "success": True,
            "document": BookingDocumentSerializer(document).data,
            "payment": PaymentSerializer(payment).data if payment else None,
        })

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        serializer = RejectDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        document = reject_document(_parse_uuid(pk, "id"), request.user, serializer.validated_data["reason"])
        return Response({
            "success": True,
            "document": BookingDocumentSerializer(document).data,
        })

    @action(detail=False, methods=["get"])
    def pending(self, request):
        documents = get_pending_verification_documents()
        page = self.paginate_queryset(documents)
        if page is not None:
            return self.get_paginated_response(BookingDocumentSerializer(page, many=True).data)
        return Response(BookingDocumentSerializer(documents, many=True).data)

    # ------------------------------
    # Per-booking views
    # ------------------------------
    def _get_accessible_booking(self, booking_id):
        booking = Booking.objects.filter(pk=_parse_uuid(booking_id, "booking_id")).first()
        if booking is None:
            raise NotFound("Booking not found.")
        user = self.request.user
        if not user.is_lab_admin and booking.user_id != user.pk:
            raise Forbidden("You don't have permission to view this booking")
        return booking

    @action(detail=False, methods=["get"], url_path=rf"booking/(?P<booking_id>{UUID_REGEX})/latest")
    def latest(self, request, booking_id=None):
        booking = self._get_accessible_booking(booking_id)
        latest = get_latest_documents_by_type(booking.pk)
        return Response({
            doc_type: BookingDocumentSerializer(document).data if document else None
            for doc_type, document in latest.items()
        })

    @action(detail=False, methods=["get"], url_path=rf"booking/(?P<booking_id>{UUID_REGEX})/verification-state")
    def verification_state(self, request, booking_id=None):
        booking = self._get_accessible_booking(booking_id)
        state = get_document_verification_state(booking.pk)
        return Response({
            "state": state,
            "eligibility": compute_download_eligibility(state),
        })

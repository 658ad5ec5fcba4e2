from .booking_document import BookingDocumentViewSet

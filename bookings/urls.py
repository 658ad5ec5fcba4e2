# bookings/urls.py
from rest_framework.routers import DefaultRouter
from django.urls import path, include
from bookings.apis import BookingDocumentViewSet

# -----------------------------------------------------
# 🔹 Router registration for all API endpoints
# -----------------------------------------------------
router = DefaultRouter()
router.register(r"booking-docs", BookingDocumentViewSet, basename="booking-doc")

# -----------------------------------------------------
# 🔹 URL patterns
# -----------------------------------------------------
urlpatterns = [
    path("", include(router.urls)),
]

from .booking import Booking, WorkspaceBooking, ServiceForm
from .booking_document import FileBlob, BookingDocument

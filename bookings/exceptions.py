from rest_framework import status
from rest_framework.exceptions import APIException


class DocumentNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Document not found."
    default_code = "document_not_found"


class DocumentStateConflict(APIException):
    """Document is no longer in the state the action expects (already handled, or a newer upload is in review)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Document has already been processed."
    default_code = "document_state_conflict"


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Only administrators can perform this action."
    default_code = "forbidden"

import logging

from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

# Messages used when DRF gives us field errors instead of a single string
DEFAULT_ERRORS = {
    exceptions.ValidationError: "Invalid input",
    exceptions.ParseError: "Malformed request body",
}


def api_exception_handler(exc, context):
    """
    Render every API error as ``{"error": ..., "details": ...}``.

    ``error`` is a short human-readable message, ``details`` carries the
    field-level errors (validation) or the parser message, otherwise null.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    error = None
    details = None

    for exc_class, message in DEFAULT_ERRORS.items():
        if isinstance(exc, exc_class):
            error = message
            details = data
            break

    if error is None:
        if isinstance(data, dict) and "detail" in data:
            error = str(data["detail"])
            details = {k: v for k, v in data.items() if k != "detail"} or None
        else:
            error = "Request failed"
            details = data

    if isinstance(exc, exceptions.ParseError) and isinstance(details, dict) and "detail" in details:
        details = str(details["detail"])

    view = context.get("view")
    logger.info(
        f"API error {response.status_code} in {view.__class__.__name__ if view else 'unknown view'}: {error}"
    )

    response.data = {"error": error, "details": details}
    return response

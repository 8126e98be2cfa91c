import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from roster.exceptions import RosterError

log = logging.getLogger(__name__)

def roster_exception_handler(exc, context):
    """Renders domain errors and DRF errors as `{"message", "code"}`."""
    if isinstance(exc, RosterError):
        log.info("%s: %s", exc.code, exc.message)
        return Response({"message": exc.message, "code": exc.code}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and "detail" in response.data:
        detail = response.data["detail"]
        response.data = {"message": str(detail), "code": getattr(detail, "code", "error")}
    return response

# core/api.py
"""
Glue between CommandResult and DRF responses.

Error kinds map to status codes:
    validation -> 400, not_found -> 404, conflict -> 409, state -> 409
"""

from rest_framework import status
from rest_framework.response import Response

from core.commands import CommandResult, ErrorKind


ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.STATE: status.HTTP_409_CONFLICT,
}


def error_response(result: CommandResult) -> Response:
    return Response(
        {"detail": result.error, "code": str(result.kind)},
        status=ERROR_STATUS.get(result.kind, status.HTTP_400_BAD_REQUEST),
    )


def result_response(result: CommandResult, serializer_class=None, success_status=status.HTTP_200_OK) -> Response:
    """
    Render a command result.

    Warnings from partially successful commands (e.g. order confirmed but
    invoice generation failed) are returned under "warnings".
    """
    if not result.success:
        return error_response(result)

    data = serializer_class(result.data).data if serializer_class else result.data
    if result.warnings:
        data = dict(data)
        data["warnings"] = result.warnings
    return Response(data, status=success_status)

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from policy.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    PolicyError,
    ValidationError,
)

logger = logging.getLogger(__name__)

POLICY_ERROR_STATUS = {
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}


def api_exception_handler(exc, context):
    """Render lifecycle errors with their code; defer everything else to DRF."""
    if isinstance(exc, PolicyError):
        status_code = POLICY_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
        view = context.get("view")
        logger.info(
            "%s refused in %s: %s",
            exc.code,
            view.__class__.__name__ if view else "unknown view",
            exc.detail,
        )
        data = exc.as_dict()
        data["success"] = False
        return Response(data, status=status_code)
    return exception_handler(exc, context)

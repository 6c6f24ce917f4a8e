"""
DRF exception handler for application errors.

Registered in settings as REST_FRAMEWORK["EXCEPTION_HANDLER"]. Domain
errors (BaseApplicationError subclasses) are rendered with their
to_dict() payload and the status code declared on the class; every
other exception falls through to DRF's default handler.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def application_exception_handler(exc, context):
    """Render BaseApplicationError as JSON; delegate everything else to DRF."""
    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        log_extra = {
            "error_code": exc.error_code,
            "view": type(view).__name__ if view is not None else None,
        }
        if exc.http_status >= 500:
            logger.error(f"Application error: {exc}", extra=log_extra)
        else:
            logger.info(f"Application error: {exc}", extra=log_extra)
        return Response(exc.to_dict(), status=exc.http_status)

    return exception_handler(exc, context)

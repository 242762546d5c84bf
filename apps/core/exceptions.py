"""DRF exception handler with the API's error body format."""

from __future__ import annotations

from typing import Any, Optional

import structlog
from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from .audit import AUTH, default_audit_sink

logger = structlog.get_logger(__name__)

TOKEN_INVALID_BODY = {
    "status": "error",
    "message": "Invalid or expired token",
}


def token_invalid_response(audit=default_audit_sink) -> Response:
    body = dict(TOKEN_INVALID_BODY)
    audit.record_event(AUTH, "tokenInvalid", body)
    return Response(body, status=status.HTTP_401_UNAUTHORIZED)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Optional[Response]:
    """
    Map authentication failures to the token-invalid body.

    Missing, malformed, expired and revoked tokens all answer 401 with
    ``{"status": "error", "message": "Invalid or expired token"}``. Other
    errors keep DRF's default handling.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        request = context.get("request")
        logger.info("auth.token_rejected", path=getattr(request, "path", None), error=str(exc))
        rejected = token_invalid_response()
        if "WWW-Authenticate" in response:
            rejected["WWW-Authenticate"] = response["WWW-Authenticate"]
        return rejected

    return response

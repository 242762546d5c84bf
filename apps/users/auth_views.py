"""Views for authentication flows (login, register, logout, token refresh)."""

from __future__ import annotations

import structlog
from django.contrib.auth import authenticate  # type: ignore
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import SlidingToken  # type: ignore

from apps.core.audit import AUTH, default_audit_sink
from apps.core.exceptions import token_invalid_response

from .auth_serializers import LoginSerializer, RegisterSerializer
from .serializers import UserSerializer

logger = structlog.get_logger(__name__)


def _authorisation_for_user(user) -> dict[str, str]:
    return {"token": str(SlidingToken.for_user(user)), "type": "bearer"}


class PublicAuthView(APIView):
    """Endpoints reachable without a token; a stale token header is ignored."""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    audit = default_audit_sink

    def reject(self, operation: str, body: dict, status_code: int) -> Response:
        self.audit.record_event(AUTH, operation, body)
        return Response(body, status=status_code)


class LoginView(PublicAuthView):
    def post(self, request):  # type: ignore
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return self.reject(
                "login",
                {
                    "status": "error",
                    "message": "Login fields validation failed",
                    "fields": serializer.errors,
                },
                status.HTTP_422_UNPROCESSABLE_ENTITY,
            )

        user = authenticate(
            request,
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
        )
        if user is None:
            return self.reject(
                "login",
                {"status": "error", "message": "Wrong login credentials"},
                status.HTTP_401_UNAUTHORIZED,
            )

        logger.info("auth.login", user_id=user.pk)
        data = {
            "status": "success",
            "user": UserSerializer(user).data,
            "authorisation": _authorisation_for_user(user),
        }
        return Response(data, status=status.HTTP_200_OK)


class RegisterView(PublicAuthView):
    def post(self, request):  # type: ignore
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return self.reject(
                "register",
                {
                    "status": "error",
                    "message": "Registration fields validation failed",
                    "fields": serializer.errors,
                },
                status.HTTP_422_UNPROCESSABLE_ENTITY,
            )

        user = serializer.save()
        logger.info("auth.register", user_id=user.pk)
        data = {
            "status": "success",
            "message": "User created successfully",
            "user": UserSerializer(user).data,
            "authorisation": _authorisation_for_user(user),
        }
        return Response(data, status=status.HTTP_200_OK)


class TokenInvalidView(PublicAuthView):
    def get(self, request):  # type: ignore
        return token_invalid_response(self.audit)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):  # type: ignore
        request.auth.blacklist()
        logger.info("auth.logout", user_id=request.user.pk)
        return Response({"status": "success", "message": "Successfully logged out"}, status=status.HTTP_200_OK)


class RefreshView(APIView):
    """Swap the current token for a fresh one; the old token stops working."""

    permission_classes = [IsAuthenticated]

    def post(self, request):  # type: ignore
        request.auth.blacklist()
        data = {
            "status": "success",
            "user": UserSerializer(request.user).data,
            "authorisation": _authorisation_for_user(request.user),
        }
        return Response(data, status=status.HTTP_200_OK)

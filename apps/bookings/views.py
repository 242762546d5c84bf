"""API views for the booking domain."""

from __future__ import annotations

import structlog
from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .exceptions import BookingValidationError, PersistenceFailure, PolicyViolation
from .serializers import BookingSubmissionSerializer, BookingViewSerializer
from .services import BookingService

logger = structlog.get_logger(__name__)


class BookingsView(APIView):
    """Create a booking or list the bookings of one date."""

    permission_classes = [permissions.IsAuthenticated]

    def get_service(self) -> BookingService:
        return BookingService.default()

    @extend_schema(request=BookingSubmissionSerializer, responses={200: None, 406: None, 422: None})
    def post(self, request):  # type: ignore
        try:
            self.get_service().submit_booking(request.data)
        except BookingValidationError as exc:
            return Response(exc.body(), status=status.HTTP_422_UNPROCESSABLE_ENTITY)
        except PolicyViolation as exc:
            logger.info("booking.rejected", reason=exc.reason, user_id=request.user.pk)
            return Response(exc.body(), status=status.HTTP_406_NOT_ACCEPTABLE)
        except PersistenceFailure as exc:
            return Response(exc.body(), status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"status": "success", "message": "Booking made successfully"}, status=status.HTTP_200_OK)

    @extend_schema(
        parameters=[OpenApiParameter("date", str, description="YYYY-MM-DD", required=True)],
        responses={200: BookingViewSerializer(many=True), 422: None},
    )
    def get(self, request):  # type: ignore
        try:
            bookings = self.get_service().list_bookings_for_date(request.query_params)
        except BookingValidationError as exc:
            return Response(exc.body(), status=status.HTTP_422_UNPROCESSABLE_ENTITY)

        return Response(BookingViewSerializer(bookings, many=True).data)

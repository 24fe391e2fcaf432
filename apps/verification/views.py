from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.codes.services import decode_qr_payload
from .models import VerificationLog
from .serializers import (
    ManualVerificationSerializer,
    QRVerificationSerializer,
    VerificationResultSerializer,
    VerificationLogSerializer,
)
from .services import classify_code


def _valid_ip(value):
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


def get_client_ip(request):
    """First X-Forwarded-For hop if it is an IP address, else REMOTE_ADDR, else None."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        client_ip = _valid_ip(forwarded.split(',')[0].strip())
        if client_ip:
            return client_ip
    return _valid_ip(request.META.get('REMOTE_ADDR') or '')


class VerificationView(APIView):
    """Shared handling for anonymous redemption endpoints."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'verification'

    def respond(self, request, code_value, location):
        result = classify_code(
            code_value,
            latitude=location.get('latitude'),
            longitude=location.get('longitude'),
            user=request.user,
            ip_address=get_client_ip(request),
        )
        return Response(VerificationResultSerializer(result).data, status=status.HTTP_200_OK)


class ManualVerificationView(VerificationView):
    """
    Verify a code typed by the consumer.

    POST /api/verify/
    Body: {"code": "LUM-7KQ2XHP9MA", "latitude": 6.52, "longitude": 3.37}
    """

    @extend_schema(request=ManualVerificationSerializer, responses=VerificationResultSerializer)
    def post(self, request):
        serializer = ManualVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self.respond(request, serializer.validated_data['code'], serializer.validated_data)


class QRVerificationView(VerificationView):
    """
    Verify a code from a scanned QR payload.

    POST /api/verify/qr/
    Body: {"payload": "LUM-7KQ2XHP9MA"}
    """

    @extend_schema(request=QRVerificationSerializer, responses=VerificationResultSerializer)
    def post(self, request):
        serializer = QRVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        code_value = decode_qr_payload(serializer.validated_data['payload'])
        return self.respond(request, code_value, serializer.validated_data)


class HistoryPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class VerificationHistoryView(ListAPIView):
    """
    Verification attempts made by the current user.

    GET /api/verify/history/
    """

    serializer_class = VerificationLogSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = HistoryPagination

    def get_queryset(self):
        return VerificationLog.objects.filter(user=self.request.user)

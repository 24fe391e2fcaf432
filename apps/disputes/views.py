from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsManufacturer, IsBackOffice
from .models import DisputeStatus
from .serializers import (
    DisputeCreateSerializer,
    DisputeFilterSerializer,
    DisputeListSerializer,
    DisputeSerializer,
    InvestigateInputSerializer,
    ResolveInputSerializer,
    RefundInputSerializer,
    RejectInputSerializer,
)
from .services import (
    create_dispute,
    start_investigation,
    resolve_dispute,
    approve_refund,
    reject_dispute,
    get_dispute,
    list_disputes,
)


UUID_PATTERN = r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'


class DisputePagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100


class DisputeViewSet(viewsets.GenericViewSet):
    """
    Payment disputes.

    list: Manufacturers see their own; back-office sees all
    create: Manufacturer opens a dispute for one of its payments
    retrieve: Dispute with its transition history
    investigate / resolve / refund / reject: Back-office transitions
    """

    serializer_class = DisputeSerializer
    pagination_class = DisputePagination
    lookup_value_regex = UUID_PATTERN

    BACK_OFFICE_ACTIONS = ['investigate', 'resolve', 'refund', 'reject']

    def get_permissions(self):
        """Use different permissions for different actions."""
        if self.action == 'create':
            return [IsAuthenticated(), IsManufacturer()]
        if self.action in self.BACK_OFFICE_ACTIONS:
            return [IsAuthenticated(), IsBackOffice()]
        return [IsAuthenticated(), (IsManufacturer | IsBackOffice)()]

    def _scope(self):
        """Manufacturer id to restrict reads to, or None for back-office."""
        user = self.request.user
        return None if user.is_back_office else user.id

    @extend_schema(
        parameters=[
            OpenApiParameter('status', str, enum=DisputeStatus.values),
            OpenApiParameter('manufacturer', str, description='Manufacturer UUID (back-office only)'),
        ],
        responses=DisputeListSerializer(many=True),
    )
    def list(self, request):
        filter_serializer = DisputeFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        manufacturer_id = self._scope()
        if manufacturer_id is None:
            manufacturer_id = params.get('manufacturer')

        disputes = list_disputes(status=params.get('status'), manufacturer_id=manufacturer_id)

        page = self.paginate_queryset(disputes)
        serializer = DisputeListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=DisputeCreateSerializer, responses={201: DisputeSerializer})
    def create(self, request):
        serializer = DisputeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = create_dispute(manufacturer_id=request.user.id, **serializer.validated_data)
        return Response(DisputeSerializer(dispute).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        dispute = get_dispute(pk, manufacturer_id=self._scope())
        return Response(DisputeSerializer(dispute).data)

    @extend_schema(request=InvestigateInputSerializer, responses=DisputeSerializer)
    @action(detail=True, methods=['post'])
    def investigate(self, request, pk=None):
        """
        Start investigating an open dispute.

        POST /api/disputes/{id}/investigate/
        Body: {"notes": "optional"}
        """
        serializer = InvestigateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = start_investigation(
            dispute_id=pk,
            investigator=request.user.actor_id,
            notes=serializer.validated_data['notes'],
        )
        return Response(DisputeSerializer(dispute).data)

    @extend_schema(request=ResolveInputSerializer, responses=DisputeSerializer)
    @action(detail=True, methods=['post'])
    def resolve(self, request, pk=None):
        """
        Resolve a dispute without refund.

        POST /api/disputes/{id}/resolve/
        Body: {"resolution_notes": "..."}
        """
        serializer = ResolveInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = resolve_dispute(
            dispute_id=pk,
            actor=request.user.actor_id,
            resolution_notes=serializer.validated_data['resolution_notes'],
        )
        return Response(DisputeSerializer(dispute).data)

    @extend_schema(request=RefundInputSerializer, responses=DisputeSerializer)
    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        """
        Approve a refund (defaults to the claimed amount).

        POST /api/disputes/{id}/refund/
        Body: {"refund_amount": "2500.00", "notes": "optional"}
        """
        serializer = RefundInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = approve_refund(
            dispute_id=pk,
            actor=request.user.actor_id,
            refund_amount=serializer.validated_data.get('refund_amount'),
            notes=serializer.validated_data['notes'],
        )
        return Response(DisputeSerializer(dispute).data)

    @extend_schema(request=RejectInputSerializer, responses=DisputeSerializer)
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """
        Reject a dispute; a reason is mandatory.

        POST /api/disputes/{id}/reject/
        Body: {"reason": "..."}
        """
        serializer = RejectInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = reject_dispute(
            dispute_id=pk,
            actor=request.user.actor_id,
            reason=serializer.validated_data['reason'],
        )
        return Response(DisputeSerializer(dispute).data)

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.permissions import IsBackOffice
from .analytics import StatsQueries
from .serializers import (
    # Input serializers
    DisputeStatsQuerySerializer,
    VerificationStatsQuerySerializer,
    HotspotQuerySerializer,
    TrendQuerySerializer,
    # Response serializers
    DisputeStatsResponseSerializer,
    VerificationSummarySerializer,
    HotspotResponseSerializer,
    TrendResponseSerializer,
)


@extend_schema(
    parameters=[
        OpenApiParameter('recent', OpenApiTypes.INT, description='Number of recent disputes', default=5),
    ],
    responses={200: DisputeStatsResponseSerializer},
    description="Dispute counts per status, disputed and refunded totals, and the newest disputes.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBackOffice])
def dispute_stats(request):
    """Dispute summary - thin HTTP handler."""
    query_serializer = DisputeStatsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = StatsQueries.dispute_summary()
    data['recent'] = StatsQueries.recent_disputes(limit=params['recent'])

    return Response(DisputeStatsResponseSerializer(data).data)


@extend_schema(
    parameters=[
        OpenApiParameter('manufacturer', OpenApiTypes.UUID, description='Only scans of this manufacturer\'s codes'),
        OpenApiParameter('since', OpenApiTypes.DATETIME, description='Only scans at or after this moment'),
    ],
    responses={200: VerificationSummarySerializer},
    description="Verification attempt counts per verdict.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBackOffice])
def verification_stats(request):
    """Verdict counts - thin HTTP handler."""
    query_serializer = VerificationStatsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = StatsQueries.verification_summary(
        manufacturer_id=params.get('manufacturer'),
        since=params.get('since')
    )

    return Response(VerificationSummarySerializer(data).data)


@extend_schema(
    parameters=[
        OpenApiParameter('limit', OpenApiTypes.INT, description='Number of clusters', default=10),
        OpenApiParameter('precision', OpenApiTypes.INT, description='Decimal places kept (0-6)', default=2),
        OpenApiParameter('verdict', OpenApiTypes.STR, many=True, description='Verdicts to include'),
    ],
    responses={200: HotspotResponseSerializer},
    description="Busiest scan locations, clustered on a lat/lng grid.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBackOffice])
def hotspots(request):
    """Location clusters - thin HTTP handler."""
    query_serializer = HotspotQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = StatsQueries.hotspot_clusters(
        limit=params['limit'],
        precision=params['precision'],
        verdicts=params.get('verdict') or None
    )

    return Response({
        'precision': params['precision'],
        'results': data,
    })


@extend_schema(
    parameters=[
        OpenApiParameter('days', OpenApiTypes.INT, description='Window length in days', default=30),
    ],
    responses={200: TrendResponseSerializer},
    description="Daily verification counts per verdict, zero-filled.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBackOffice])
def verification_trend(request):
    """Daily verdict trend for charts - thin HTTP handler."""
    query_serializer = TrendQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = StatsQueries.verification_trend(days=params['days'])

    return Response(TrendResponseSerializer({'days': params['days'], 'data': data}).data)

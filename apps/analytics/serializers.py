"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    DisputeStatsQuerySerializer - Validates the recent disputes limit
    VerificationStatsQuerySerializer - Validates manufacturer/since filters
    HotspotQuerySerializer - Validates hotspot clustering parameters
    TrendQuerySerializer - Validates the trend window

Response Serializers:
    DisputeStatsResponseSerializer - Dispute summary with recent disputes
    VerificationSummarySerializer - Counts per verdict
    HotspotResponseSerializer - Ranked location clusters
    TrendResponseSerializer - Daily verdict counts
"""

from rest_framework import serializers

from apps.disputes.models import DisputeStatus
from apps.verification.models import Verdict


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class DisputeStatsQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for dispute stats.

    Query Parameters:
        recent (int): Number of recent disputes to include (1-50)
    """

    recent = serializers.IntegerField(
        min_value=1,
        max_value=50,
        required=False,
        default=5,
        help_text='Number of recent disputes (1-50)'
    )


class VerificationStatsQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for verification stats.

    Query Parameters:
        manufacturer (UUID): Only scans of this manufacturer's codes
        since (datetime): Only scans at or after this moment
    """

    manufacturer = serializers.UUIDField(required=False)
    since = serializers.DateTimeField(required=False)


class HotspotQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for hotspot clusters.

    Query Parameters:
        limit (int): Number of clusters (1-100)
        precision (int): Decimal places kept when gridding (0-6)
        verdict (str, repeatable): Only cluster these verdicts
    """

    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)
    precision = serializers.IntegerField(min_value=0, max_value=6, required=False, default=2)
    verdict = serializers.ListField(
        child=serializers.ChoiceField(choices=Verdict.choices),
        required=False,
        help_text='Repeat to filter by several verdicts'
    )


class TrendQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for the verification trend.

    Query Parameters:
        days (int): Window length in days (1-365)
    """

    days = serializers.IntegerField(min_value=1, max_value=365, required=False, default=30)


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class StatusCountsSerializer(serializers.Serializer):
    """Count per dispute status."""

    def get_fields(self):
        return {status: serializers.IntegerField() for status in DisputeStatus.values}


class VerdictCountsSerializer(serializers.Serializer):
    """Count per verification verdict."""

    def get_fields(self):
        return {verdict: serializers.IntegerField() for verdict in Verdict.values}


class RecentDisputeSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    reference = serializers.CharField()
    manufacturer_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=DisputeStatus.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    claimed_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    refunded_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    created_at = serializers.DateTimeField()


class DisputeStatsResponseSerializer(serializers.Serializer):
    """Response serializer for dispute stats."""
    total = serializers.IntegerField()
    by_status = StatusCountsSerializer()
    total_disputed = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_refunded = serializers.DecimalField(max_digits=14, decimal_places=2)
    recent = RecentDisputeSerializer(many=True)


class VerificationSummarySerializer(serializers.Serializer):
    """Response serializer for verification stats."""
    total = serializers.IntegerField()
    by_verdict = VerdictCountsSerializer()
    flagged = serializers.IntegerField()


class HotspotSerializer(serializers.Serializer):
    """Nested serializer for one location cluster."""
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    count = serializers.IntegerField()
    verdicts = serializers.DictField(child=serializers.IntegerField())


class HotspotResponseSerializer(serializers.Serializer):
    precision = serializers.IntegerField()
    results = HotspotSerializer(many=True)


class TrendPointSerializer(serializers.Serializer):
    """Nested serializer for one day of the trend."""
    date = serializers.DateField()
    total = serializers.IntegerField()
    by_verdict = VerdictCountsSerializer()


class TrendResponseSerializer(serializers.Serializer):
    days = serializers.IntegerField()
    data = TrendPointSerializer(many=True)

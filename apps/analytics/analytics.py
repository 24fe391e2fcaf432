"""
Analytics Module
=================

Read-only rollups over disputes and the verification log for reporting
dashboards and exports.

Classes:
    StatsQueries: Static methods for the reporting queries.

Key Features:
    - Dispute counts per status with disputed and refunded totals
    - Most recent disputes
    - Verification counts per verdict
    - Geographic hotspot clusters from logged scan locations
    - Daily verdict trend for charts

Example:
    Getting the dispute overview::

        from apps.analytics.analytics import StatsQueries

        summary = StatsQueries.dispute_summary()
        print(f"Open: {summary['by_status']['OPEN']}")
        print(f"Refunded: {summary['total_refunded']}")

Note:
    This module never writes and takes no locks. Results are plain
    dictionaries and lists, and empty tables produce zeros rather than
    errors. Reads may trail in-flight redemptions or transitions.
"""

from collections import Counter
from datetime import timedelta
from decimal import Decimal

from django.db.models import Sum, Count
from django.db.models.functions import TruncDate, Coalesce
from django.utils import timezone

from apps.common.db import store_operation
from apps.disputes.models import Dispute, DisputeStatus
from apps.verification.models import VerificationLog, Verdict
from .exceptions import InvalidPrecisionError, InvalidVerdictFilterError, InvalidTrendWindowError


MAX_PRECISION = 6
MAX_TREND_DAYS = 365


def _verdict_counts(rows):
    """Fill every verdict key, defaulting to zero."""
    counts = {verdict: 0 for verdict in Verdict.values}
    for row in rows:
        counts[row['verdict']] = row['count']
    return counts


class StatsQueries:
    """
    Reporting queries for disputes and verifications.

    Methods:
        dispute_summary: Counts per dispute status and money totals.
        recent_disputes: The N newest disputes.
        verification_summary: Counts per verdict, optionally scoped.
        hotspot_clusters: Top-N locations by scan count.
        verification_trend: Daily verdict counts over a window.

    Example:
        Back-office dashboard::

            disputes = StatsQueries.dispute_summary()
            verifications = StatsQueries.verification_summary()
            hotspots = StatsQueries.hotspot_clusters(limit=5)
    """

    @staticmethod
    def dispute_summary():
        """
        Count disputes per status and total the money involved.

        Returns:
            dict: A dictionary containing:
                - total (int): Number of disputes.
                - by_status (dict[str, int]): Count for every status,
                  zero when none.
                - total_disputed (Decimal): Sum of claimed amounts.
                - total_refunded (Decimal): Sum of refunded amounts.
        """
        with store_operation('dispute summary'):
            rows = Dispute.objects.order_by().values('status').annotate(count=Count('id'))
            totals = Dispute.objects.aggregate(
                total=Count('id'),
                total_disputed=Coalesce(Sum('claimed_amount'), Decimal('0.00')),
                total_refunded=Coalesce(Sum('refunded_amount'), Decimal('0.00')),
            )

        by_status = {value: 0 for value in DisputeStatus.values}
        for row in rows:
            by_status[row['status']] = row['count']

        return {
            'total': totals['total'],
            'by_status': by_status,
            'total_disputed': totals['total_disputed'],
            'total_refunded': totals['total_refunded'],
        }

    @staticmethod
    def recent_disputes(limit=5):
        """
        Get the most recently opened disputes, newest first.

        Args:
            limit (int, optional): Maximum number of disputes. Defaults to 5.

        Returns:
            list[dict]: Each with id, reference, manufacturer_id, status,
            amount, claimed_amount, refunded_amount and created_at.
        """
        with store_operation('recent disputes'):
            return list(
                Dispute.objects.order_by('-created_at').values(
                    'id',
                    'reference',
                    'manufacturer_id',
                    'status',
                    'amount',
                    'claimed_amount',
                    'refunded_amount',
                    'created_at',
                )[:limit]
            )

    @staticmethod
    def verification_summary(manufacturer_id=None, since=None):
        """
        Count verification attempts per verdict.

        Args:
            manufacturer_id (UUID, optional): Only count scans of codes
                belonging to this manufacturer's products. INVALID scans
                match no code and are therefore excluded when scoped.
            since (datetime, optional): Only count scans at or after this
                moment.

        Returns:
            dict: A dictionary containing:
                - total (int): Number of logged attempts.
                - by_verdict (dict[str, int]): Count for every verdict.
                - flagged (int): Attempts upgraded to SUSPICIOUS_PATTERN.
        """
        logs = VerificationLog.objects.order_by()
        if manufacturer_id is not None:
            logs = logs.filter(code__batch__product__manufacturer_id=manufacturer_id)
        if since is not None:
            logs = logs.filter(created_at__gte=since)

        with store_operation('verification summary'):
            by_verdict = _verdict_counts(logs.values('verdict').annotate(count=Count('id')))

        return {
            'total': sum(by_verdict.values()),
            'by_verdict': by_verdict,
            'flagged': by_verdict[Verdict.SUSPICIOUS_PATTERN],
        }

    @staticmethod
    def hotspot_clusters(limit=10, precision=2, verdicts=None):
        """
        Group located scans into grid cells and rank the busiest.

        Coordinates are rounded to ``precision`` decimal places (2 places
        is roughly a 1 km cell at the equator). Scans without a location
        are ignored.

        Args:
            limit (int, optional): Number of clusters to return. Defaults to 10.
            precision (int, optional): Decimal places kept, 0 to 6.
                Defaults to 2.
            verdicts (list[str], optional): Only cluster these verdicts.
                If None, every verdict counts.

        Returns:
            list[dict]: Busiest first, each containing:
                - latitude (float): Cell latitude.
                - longitude (float): Cell longitude.
                - count (int): Scans in the cell.
                - verdicts (dict[str, int]): Scans per verdict in the cell.

        Raises:
            InvalidPrecisionError: If precision is outside 0 to 6.
            InvalidVerdictFilterError: If an unknown verdict is given.

        Example:
            Where counterfeits surface::

                clusters = StatsQueries.hotspot_clusters(
                    verdicts=['CODE_ALREADY_USED', 'SUSPICIOUS_PATTERN'],
                )
        """
        if isinstance(precision, bool) or not isinstance(precision, int) \
                or not 0 <= precision <= MAX_PRECISION:
            raise InvalidPrecisionError()

        logs = VerificationLog.objects.order_by().filter(
            latitude__isnull=False,
            longitude__isnull=False
        )
        if verdicts:
            unknown = set(verdicts) - set(Verdict.values)
            if unknown:
                raise InvalidVerdictFilterError(f"Unknown verdicts: {', '.join(sorted(unknown))}")
            logs = logs.filter(verdict__in=verdicts)

        with store_operation('hotspot clusters'):
            points = list(logs.values_list('latitude', 'longitude', 'verdict'))

        cells = {}
        for latitude, longitude, verdict in points:
            key = (round(latitude, precision), round(longitude, precision))
            cells.setdefault(key, Counter())[verdict] += 1

        ranked = sorted(
            cells.items(),
            key=lambda item: (-sum(item[1].values()), item[0])
        )

        return [
            {
                'latitude': latitude,
                'longitude': longitude,
                'count': sum(counter.values()),
                'verdicts': dict(counter),
            }
            for (latitude, longitude), counter in ranked[:limit]
        ]

    @staticmethod
    def verification_trend(days=30):
        """
        Daily verdict counts for the last ``days`` days, today included.

        Every day in the window is present, with zeros on quiet days.

        Args:
            days (int, optional): Window length, 1 to 365. Defaults to 30.

        Returns:
            list[dict]: Oldest first, each containing:
                - date (date): The day.
                - total (int): Attempts that day.
                - by_verdict (dict[str, int]): Count for every verdict.

        Raises:
            InvalidTrendWindowError: If days is outside 1 to 365.
        """
        if isinstance(days, bool) or not isinstance(days, int) or not 1 <= days <= MAX_TREND_DAYS:
            raise InvalidTrendWindowError()

        today = timezone.localdate()
        start = today - timedelta(days=days - 1)

        with store_operation('verification trend'):
            rows = (
                VerificationLog.objects.order_by()
                .filter(created_at__date__gte=start)
                .annotate(day=TruncDate('created_at'))
                .values('day', 'verdict')
                .annotate(count=Count('id'))
            )
            rows = list(rows)

        series = {}
        for offset in range(days):
            day = start + timedelta(days=offset)
            series[day] = {verdict: 0 for verdict in Verdict.values}
        for row in rows:
            if row['day'] in series:
                series[row['day']][row['verdict']] = row['count']

        return [
            {
                'date': day,
                'total': sum(counts.values()),
                'by_verdict': counts,
            }
            for day, counts in series.items()
        ]

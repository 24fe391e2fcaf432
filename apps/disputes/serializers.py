from rest_framework import serializers

from .models import Dispute, DisputeStatus, DisputeTransition


# =============================================================================
# Input Serializers
# =============================================================================

class DisputeCreateSerializer(serializers.Serializer):
    payment_id = serializers.UUIDField()
    reason = serializers.CharField(max_length=200)
    description = serializers.CharField()
    claimed_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class DisputeFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for dispute listing.

    Query Parameters:
        status (str): Filter by dispute status
        manufacturer (UUID): Filter by manufacturer (back-office only)
    """

    status = serializers.ChoiceField(choices=DisputeStatus.choices, required=False)
    manufacturer = serializers.UUIDField(required=False)


class InvestigateInputSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ResolveInputSerializer(serializers.Serializer):
    # Blank values reach the service, which refuses them
    resolution_notes = serializers.CharField(required=False, allow_blank=True, default='')


class RefundInputSerializer(serializers.Serializer):
    refund_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class RejectInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class DisputeTransitionSerializer(serializers.ModelSerializer):
    class Meta:
        model = DisputeTransition
        fields = ['from_status', 'to_status', 'actor', 'notes', 'created_at']
        read_only_fields = fields


class DisputeListSerializer(serializers.ModelSerializer):
    manufacturer_name = serializers.CharField(source='manufacturer.company_name', read_only=True)

    class Meta:
        model = Dispute
        fields = [
            'id',
            'reference',
            'manufacturer',
            'manufacturer_name',
            'amount',
            'claimed_amount',
            'reason',
            'status',
            'refunded_amount',
            'created_at',
        ]
        read_only_fields = fields


class DisputeSerializer(serializers.ModelSerializer):
    manufacturer_name = serializers.CharField(source='manufacturer.company_name', read_only=True)
    transitions = DisputeTransitionSerializer(many=True, read_only=True)

    class Meta:
        model = Dispute
        fields = [
            'id',
            'payment',
            'reference',
            'manufacturer',
            'manufacturer_name',
            'amount',
            'claimed_amount',
            'reason',
            'description',
            'status',
            'investigator',
            'investigation_notes',
            'investigation_started_at',
            'resolution_notes',
            'resolved_by',
            'resolved_at',
            'refunded_amount',
            'refunded_at',
            'transitions',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

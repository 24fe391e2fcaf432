from rest_framework import serializers

from .models import Verdict, TrustDecision, VerificationLog


# =============================================================================
# Input Serializers
# =============================================================================

class LocationInputSerializer(serializers.Serializer):
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)

    def validate(self, attrs):
        """Latitude and longitude come as a pair or not at all."""
        has_lat = attrs.get('latitude') is not None
        has_lng = attrs.get('longitude') is not None
        if has_lat != has_lng:
            raise serializers.ValidationError('Latitude and longitude must be given together')
        return attrs


class ManualVerificationSerializer(LocationInputSerializer):
    code = serializers.CharField(max_length=200, allow_blank=True)


class QRVerificationSerializer(LocationInputSerializer):
    payload = serializers.CharField(max_length=2000, trim_whitespace=False)


# =============================================================================
# Output Serializers
# =============================================================================

class VerificationResultSerializer(serializers.Serializer):
    verdict = serializers.ChoiceField(choices=Verdict.choices)
    code_value = serializers.CharField()
    risk_score = serializers.IntegerField()
    trust_decision = serializers.ChoiceField(choices=TrustDecision.choices)
    advisories = serializers.ListField(child=serializers.CharField())
    checked_at = serializers.DateTimeField()
    product_name = serializers.CharField(allow_null=True)
    manufacturer_name = serializers.CharField(allow_null=True)
    batch_number = serializers.CharField(allow_null=True)
    expiry_date = serializers.DateField(allow_null=True)
    used_at = serializers.DateTimeField(allow_null=True)


class VerificationLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = VerificationLog
        fields = [
            'id',
            'code_value',
            'verdict',
            'base_verdict',
            'risk_score',
            'trust_decision',
            'advisories',
            'latitude',
            'longitude',
            'created_at',
        ]
        read_only_fields = fields

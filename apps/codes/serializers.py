from django.core.files.storage import default_storage
from rest_framework import serializers

from .models import Product, Batch, BatchRecall, Code


# =============================================================================
# Input Serializers
# =============================================================================

class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    category = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class BatchCreateSerializer(serializers.Serializer):
    """
    Validate input for registering a batch.

    Range and date checks are repeated by the service; this layer gives
    field-level error messages.
    """

    product_id = serializers.UUIDField()
    batch_number = serializers.CharField(max_length=64)
    production_date = serializers.DateField()
    expiry_date = serializers.DateField()
    quantity = serializers.IntegerField(min_value=1)


class IssueCodesInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class RecallInputSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class BatchFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for batch listing.

    Query Parameters:
        product (UUID): Only batches of this product
    """

    product = serializers.UUIDField(required=False)


class CodeFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for code listing.

    Query Parameters:
        is_used (bool): Filter by redemption state
    """

    is_used = serializers.BooleanField(required=False, allow_null=True, default=None)


# =============================================================================
# Output Serializers
# =============================================================================

class ProductSerializer(serializers.ModelSerializer):
    batch_count = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id',
            'name',
            'category',
            'description',
            'is_active',
            'batch_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_batch_count(self, obj):
        return obj.batches.count()


class BatchRecallSerializer(serializers.ModelSerializer):
    class Meta:
        model = BatchRecall
        fields = [
            'id',
            'batch',
            'reason',
            'description',
            'status',
            'initiated_at',
            'closed_at',
        ]
        read_only_fields = fields


class BatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    code_count = serializers.SerializerMethodField()
    is_recalled = serializers.SerializerMethodField()

    class Meta:
        model = Batch
        fields = [
            'id',
            'product',
            'product_name',
            'batch_number',
            'production_date',
            'expiry_date',
            'code_count',
            'is_recalled',
            'created_at',
        ]
        read_only_fields = fields

    def get_code_count(self, obj):
        return obj.codes.count()

    def get_is_recalled(self, obj):
        return obj.has_active_recall()


class CodeSerializer(serializers.ModelSerializer):
    qr_image_url = serializers.SerializerMethodField()

    class Meta:
        model = Code
        fields = [
            'id',
            'value',
            'qr_image_path',
            'qr_image_url',
            'is_used',
            'used_at',
            'created_at',
        ]
        read_only_fields = fields

    def get_qr_image_url(self, obj):
        url = default_storage.url(obj.qr_image_path)
        request = self.context.get('request')
        return request.build_absolute_uri(url) if request else url


class BatchCodeSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    used = serializers.IntegerField()
    unused = serializers.IntegerField()

from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsManufacturer
from .models import Product, Batch, RecallStatus
from .serializers import (
    ProductCreateSerializer,
    ProductSerializer,
    BatchCreateSerializer,
    BatchSerializer,
    BatchRecallSerializer,
    IssueCodesInputSerializer,
    RecallInputSerializer,
    BatchFilterSerializer,
    CodeFilterSerializer,
    CodeSerializer,
    BatchCodeSummarySerializer,
)
from .services import (
    register_product,
    withdraw_product,
    create_batch,
    issue_codes_for_batch,
    recall_batch,
    close_batch_recall,
    get_batch_code_summary,
)


UUID_PATTERN = r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'


class CodesPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


class ProductViewSet(mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     viewsets.GenericViewSet):
    """
    Manufacturer's own products.

    list: Products of the current manufacturer
    create: Register a product
    retrieve: Product details
    withdraw: Withdraw a product from the market
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, IsManufacturer]
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        return Product.objects.filter(manufacturer=self.request.user)

    @extend_schema(request=ProductCreateSerializer, responses={201: ProductSerializer})
    def create(self, request):
        serializer = ProductCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = register_product(manufacturer=request.user, **serializer.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses=ProductSerializer)
    @action(detail=True, methods=['post'])
    def withdraw(self, request, pk=None):
        """
        Withdraw a product; its codes verify as UNREGISTERED_PRODUCT.

        POST /api/codes/products/{id}/withdraw/
        """
        product = withdraw_product(manufacturer=request.user, product_id=pk)
        return Response(ProductSerializer(product).data)


class BatchViewSet(mixins.ListModelMixin,
                   mixins.RetrieveModelMixin,
                   viewsets.GenericViewSet):
    """
    Manufacturer's batches and their codes.

    list: Batches of the current manufacturer (filter by ?product=<uuid>)
    create: Register a batch and issue its codes
    retrieve: Batch details
    codes: Codes of the batch (filter by ?is_used=true|false)
    issue: Issue additional codes
    recall: Recall the batch
    close_recall: Close the active recall
    summary: Used/unused code counts
    """

    serializer_class = BatchSerializer
    permission_classes = [IsAuthenticated, IsManufacturer]
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        queryset = Batch.objects.select_related('product').filter(
            product__manufacturer=self.request.user
        )

        filters = BatchFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        product_id = filters.validated_data.get('product')
        if product_id:
            queryset = queryset.filter(product_id=product_id)

        return queryset

    @extend_schema(request=BatchCreateSerializer, responses={201: BatchSerializer})
    def create(self, request):
        serializer = BatchCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        batch = create_batch(manufacturer=request.user, **serializer.validated_data)
        return Response(BatchSerializer(batch).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[OpenApiParameter('is_used', bool, description='Filter by redemption state')],
        responses=CodeSerializer(many=True),
    )
    @action(detail=True, methods=['get'])
    def codes(self, request, pk=None):
        """
        List codes of a batch.

        GET /api/codes/batches/{id}/codes/
        """
        batch = self.get_object()

        filter_serializer = CodeFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        is_used = filter_serializer.validated_data.get('is_used')

        codes = batch.codes.all()
        if is_used is not None:
            codes = codes.filter(is_used=is_used)

        paginator = CodesPagination()
        page = paginator.paginate_queryset(codes, request, view=self)
        serializer = CodeSerializer(page, many=True, context={'request': request})
        return paginator.get_paginated_response(serializer.data)

    @extend_schema(request=IssueCodesInputSerializer, responses={201: CodeSerializer(many=True)})
    @action(detail=True, methods=['post'])
    def issue(self, request, pk=None):
        """
        Issue more codes under a batch.

        POST /api/codes/batches/{id}/issue/
        Body: {"quantity": 100}
        """
        serializer = IssueCodesInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        codes = issue_codes_for_batch(
            manufacturer=request.user,
            batch_id=pk,
            quantity=serializer.validated_data['quantity'],
        )
        return Response(
            CodeSerializer(codes, many=True, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(request=RecallInputSerializer, responses={201: BatchRecallSerializer})
    @action(detail=True, methods=['post'])
    def recall(self, request, pk=None):
        """
        Recall a batch.

        POST /api/codes/batches/{id}/recall/
        Body: {"reason": "contamination", "description": "optional"}
        """
        serializer = RecallInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        recall = recall_batch(manufacturer=request.user, batch_id=pk, **serializer.validated_data)
        return Response(BatchRecallSerializer(recall).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses=BatchRecallSerializer)
    @action(detail=True, methods=['post'])
    def close_recall(self, request, pk=None):
        """
        Close the active recall of a batch.

        POST /api/codes/batches/{id}/close_recall/
        """
        batch = self.get_object()
        active = batch.recalls.filter(status=RecallStatus.ACTIVE).first()
        recall_id = active.id if active else batch.recalls.values_list('id', flat=True).first()

        recall = close_batch_recall(manufacturer=request.user, recall_id=recall_id)
        return Response(BatchRecallSerializer(recall).data)

    @extend_schema(responses=BatchCodeSummarySerializer)
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        """
        Used/unused code counts for a batch.

        GET /api/codes/batches/{id}/summary/
        """
        batch = self.get_object()
        summary = get_batch_code_summary(batch.id)
        return Response(BatchCodeSummarySerializer(summary).data)

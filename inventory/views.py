"""
Catalog API Views with optimized queries.

Implements:
- CRUD operations for Category (deletion blocked while products exist)
- Product listing/search with keyword and filter support
- Product save as a unit of variants (create / edit)
- Autocomplete with rate limiting
"""
import logging

from django.db.models import F, Q
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.rate_limiting import RateLimitMixin, rate_limit
from .models import Category, Product
from .serializers import (
    CategorySerializer,
    ProductGroupSerializer,
    ProductGroupWriteSerializer,
    ProductMinimalSerializer,
    ProductSerializer,
)
from .services import (
    CategoryInUseError,
    ProductValidationError,
    delete_category,
    delete_product,
    get_product_group,
    save_product,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Category Views
# =============================================================================

class CategoryListCreateView(generics.ListCreateAPIView):
    """
    GET: List all categories with product counts
    POST: Create a new category
    """
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    pagination_class = None


class CategoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a category
    PUT/PATCH: Update a category
    DELETE: Delete a category (409 if it still has products)
    """
    queryset = Category.objects.all()
    serializer_class = CategorySerializer

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        try:
            delete_category(category)
        except CategoryInUseError as e:
            return Response(
                {'error': 'Category In Use', 'detail': str(e), 'product_count': e.product_count},
                status=status.HTTP_409_CONFLICT
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Product Views
# =============================================================================

class ProductListView(RateLimitMixin, generics.ListAPIView):
    """
    GET: List variant rows with keyword and filters.

    Query Parameters:
        - q: Keyword to search in name, SKU and description
        - category_id: Filter by category ID
        - size / color: Exact (case-insensitive) variant filters
        - in_stock: Only variants with stock > 0 (true/false)
        - low_stock: Only variants at or below their minimum (true/false)

    Uses select_related to eliminate N+1 queries.
    """
    serializer_class = ProductSerializer
    rate_limit_max_requests = 120
    rate_limit_window_seconds = 60

    def get_queryset(self):
        queryset = Product.objects.select_related('category')
        params = self.request.query_params

        keyword = params.get('q', '').strip()
        if keyword:
            queryset = queryset.filter(
                Q(name__icontains=keyword) |
                Q(sku__icontains=keyword) |
                Q(description__icontains=keyword)
            )

        category_id = params.get('category_id')
        if category_id:
            queryset = queryset.filter(category_id=category_id)

        size = params.get('size', '').strip()
        if size:
            queryset = queryset.filter(size__iexact=size)

        color = params.get('color', '').strip()
        if color:
            queryset = queryset.filter(color__iexact=color)

        if params.get('in_stock', '').lower() == 'true':
            queryset = queryset.filter(stock__gt=0)

        if params.get('low_stock', '').lower() == 'true':
            queryset = queryset.filter(stock__lte=F('stock_minimum'))

        return queryset.order_by('name', 'size', 'color')


class ProductDetailView(generics.RetrieveDestroyAPIView):
    """
    GET: Retrieve a single variant
    DELETE: Delete a single variant
    """
    serializer_class = ProductSerializer

    def get_queryset(self):
        return Product.objects.select_related('category')

    def perform_destroy(self, instance):
        delete_product(instance)


class ProductGroupCreateView(APIView):
    """
    POST: Create a product with all its variants.
    """

    def post(self, request):
        serializer = ProductGroupWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _save_group(serializer.validated_data, None, status.HTTP_201_CREATED)


class ProductGroupDetailView(APIView):
    """
    GET: A logical product (shared fields + variants) by base SKU
    PUT: Replace the product's shared fields and variant set
    """

    def get(self, request, base_sku):
        group = get_product_group(base_sku)
        if group is None:
            return Response({'error': 'Not Found', 'detail': f'Product {base_sku} not found'},
                            status=status.HTTP_404_NOT_FOUND)
        return Response(ProductGroupSerializer(group).data)

    def put(self, request, base_sku):
        serializer = ProductGroupWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _save_group(serializer.validated_data, base_sku, status.HTTP_200_OK)


def _save_group(data, current_base_sku, success_status):
    variants = [dict(v) for v in data.pop('variants')]
    try:
        rows = save_product(data, variants, current_base_sku=current_base_sku)
    except ProductValidationError as e:
        logger.warning(f"Product validation failed: {e}")
        return Response(
            {'error': 'Validation Error', 'detail': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )
    except Exception as e:
        logger.exception(f"Unexpected error saving product: {e}")
        return Response(
            {'error': 'Server Error', 'detail': 'Error saving the product'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    group = get_product_group(rows[0].base_sku)
    return Response(ProductGroupSerializer(group).data, status=success_status)


class ProductAutocompleteView(APIView):
    """
    GET: Fast prefix-matching autocomplete on product name or SKU.

    Query Parameters:
        - q: Search query (minimum 3 characters)
        - in_stock: Only variants with stock > 0 (true/false)

    Returns top 10 matching variants.
    Rate limited to 20 requests per minute.
    """

    @rate_limit(max_requests=20, window_seconds=60)
    def get(self, request):
        query = request.query_params.get('q', '').strip()

        if len(query) < 3:
            return Response(
                {'error': 'Query must be at least 3 characters'},
                status=status.HTTP_400_BAD_REQUEST
            )

        queryset = Product.objects.filter(
            Q(name__istartswith=query) | Q(sku__istartswith=query)
        )
        if request.query_params.get('in_stock', '').lower() == 'true':
            queryset = queryset.filter(stock__gt=0)

        products = queryset.order_by('name', 'size', 'color')[:10]
        return Response(ProductMinimalSerializer(products, many=True).data)

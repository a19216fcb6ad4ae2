"""
Quote API Views.

Implements:
- GET /quotes/ - List quotes (status filter, client/id search)
- POST /quotes/ - Create a draft quote
- GET/PUT/DELETE /quotes/{id}/ - Detail, edit (drafts only), delete
- POST /quotes/{id}/status/ - Advance the quote status
- POST /quotes/{id}/convert/ - Convert an approved quote into a sale
- GET /quotes/{id}/print/ - Printable HTML document
- GET /quotes/summary/ - Quote counts per status
"""
import logging

from django.db.models import Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.operator import Operator
from inventory.services import InsufficientStockError
from sales.serializers import SaleSerializer
from .models import Quote
from .serializers import (
    QuoteListSerializer,
    QuoteSerializer,
    QuoteStatusSerializer,
    QuoteWriteSerializer,
)
from .services import (
    QuoteStateError,
    QuoteValidationError,
    change_status,
    convert_to_sale,
    create_quote,
    default_valid_until,
    delete_quote,
    render_quote_document,
    status_counts,
    update_quote,
)

logger = logging.getLogger(__name__)


def _detail_queryset():
    return Quote.objects.select_related('created_by', 'client', 'sale').prefetch_related(
        'items__product'
    )


def _error_response(error, exc):
    return Response(
        {'error': error, 'detail': str(exc)},
        status=status.HTTP_400_BAD_REQUEST
    )


class QuoteListCreateView(generics.ListCreateAPIView):
    """
    GET: List quotes, newest first
    POST: Create a new draft quote

    Query Parameters (GET):
        - status: Filter by status (draft, sent, approved, rejected, converted)
        - q: Search by client name or quote number
    """

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return QuoteWriteSerializer
        return QuoteListSerializer

    def get_queryset(self):
        queryset = Quote.objects.prefetch_related('items')

        status_filter = self.request.query_params.get('status', '').lower()
        if status_filter in Quote.Status.values:
            queryset = queryset.filter(status=status_filter)

        keyword = self.request.query_params.get('q', '').strip()
        if keyword:
            condition = Q(client_name__icontains=keyword)
            if keyword.lstrip('#').isdigit():
                condition |= Q(id=int(keyword.lstrip('#')))
            queryset = queryset.filter(condition)

        return queryset.order_by('-created_at')

    def create(self, request, *args, **kwargs):
        serializer = QuoteWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            quote = create_quote(
                Operator.from_request(request),
                dict(data['customer']),
                [dict(item) for item in data['items']],
                discount_percent=data['discount_percent'],
                valid_until=data['valid_until'] or default_valid_until(),
                notes=data['notes'],
            )
        except QuoteValidationError as e:
            logger.warning(f"Quote validation failed: {e}")
            return _error_response('Validation Error', e)
        except Exception as e:
            logger.exception(f"Unexpected error creating quote: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Error saving the quote'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        quote = _detail_queryset().get(pk=quote.pk)
        return Response(QuoteSerializer(quote).data, status=status.HTTP_201_CREATED)


class QuoteDetailView(APIView):
    """
    GET: Quote with items
    PUT: Replace header and items (draft quotes only)
    DELETE: Delete the quote and its items
    """

    def get(self, request, pk):
        quote = get_object_or_404(_detail_queryset(), pk=pk)
        return Response(QuoteSerializer(quote).data)

    def put(self, request, pk):
        quote = get_object_or_404(Quote, pk=pk)
        serializer = QuoteWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            quote = update_quote(
                Operator.from_request(request),
                quote,
                dict(data['customer']),
                [dict(item) for item in data['items']],
                discount_percent=data['discount_percent'],
                valid_until=data['valid_until'] or quote.valid_until,
                notes=data['notes'],
            )
        except QuoteStateError as e:
            return _error_response('Invalid Status', e)
        except QuoteValidationError as e:
            logger.warning(f"Quote validation failed: {e}")
            return _error_response('Validation Error', e)
        except Exception as e:
            logger.exception(f"Unexpected error updating quote #{pk}: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Error updating the quote'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(QuoteSerializer(_detail_queryset().get(pk=quote.pk)).data)

    def delete(self, request, pk):
        quote = get_object_or_404(Quote, pk=pk)
        delete_quote(quote)
        return Response(status=status.HTTP_204_NO_CONTENT)


class QuoteStatusView(APIView):
    """
    POST: Change the status of a quote.

    Request Body:
        {"status": "sent"}
    """

    def post(self, request, pk):
        quote = get_object_or_404(Quote, pk=pk)
        serializer = QuoteStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            quote = change_status(quote, serializer.validated_data['status'])
        except QuoteStateError as e:
            return _error_response('Invalid Status', e)

        return Response(QuoteSerializer(_detail_queryset().get(pk=quote.pk)).data)


class QuoteConvertView(APIView):
    """
    POST: Convert an approved quote into a sale.

    Returns:
        - 201: The created sale
        - 400: Quote not approved, or insufficient stock (nothing written)
    """

    def post(self, request, pk):
        quote = get_object_or_404(Quote, pk=pk)

        try:
            sale = convert_to_sale(Operator.from_request(request), quote)
        except InsufficientStockError as e:
            logger.warning(f"Quote #{pk} conversion refused: {e}")
            return _error_response('Insufficient Stock', e)
        except QuoteStateError as e:
            return _error_response('Invalid Status', e)
        except QuoteValidationError as e:
            return _error_response('Validation Error', e)
        except Exception as e:
            logger.exception(f"Unexpected error converting quote #{pk}: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Error converting the quote into a sale'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


class QuotePrintView(APIView):
    """
    GET: Standalone printable HTML for the quote.
    """

    def get(self, request, pk):
        quote = get_object_or_404(Quote.objects.select_related('created_by'), pk=pk)
        return HttpResponse(render_quote_document(quote), content_type='text/html; charset=utf-8')


class QuoteSummaryView(APIView):
    """
    GET: Number of quotes per status.
    """

    def get(self, request):
        return Response(status_counts())

"""
Catalog API Views

Public browsing of active products and cultivars, plus the farm-side
product management endpoints.

SECURITY: Management endpoints only ever act on the authenticated farm's
own products; CatalogStore enforces ownership on every write.
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsFarmAccount, IsMarketplaceAdmin
from catalog.models import Cultivar
from catalog.serializers import (
    CultivarSerializer,
    ProductDetailSerializer,
    ProductListSerializer,
    ProductWriteSerializer,
)
from catalog.services import catalog_store
from core.exceptions import ValidationFailed


def _product_input(request, partial=False):
    unknown = sorted(set(request.data) - set(ProductWriteSerializer().fields))
    if unknown:
        raise ValidationFailed(
            f"These fields cannot be set: {', '.join(unknown)}.",
            fields=unknown
        )
    serializer = ProductWriteSerializer(data=request.data, partial=partial)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# =============================================================================
# PUBLIC CATALOG
# =============================================================================

class ProductListView(generics.ListAPIView):
    """
    Active products, soonest harvest first.

    Query params: search (product or farm name), product_type (fruit|shoot|all)
    """
    permission_classes = [permissions.AllowAny]
    serializer_class = ProductListSerializer

    def get_queryset(self):
        return catalog_store.list_active(
            search=self.request.query_params.get('search'),
            product_type=self.request.query_params.get('product_type'),
        )


class ProductDetailView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, pk):
        product = catalog_store.get_by_id(pk)
        return Response(ProductDetailSerializer(product).data)


class CultivarListView(generics.ListCreateAPIView):
    """Cultivar reference list. Administrators add entries."""
    serializer_class = CultivarSerializer
    queryset = Cultivar.objects.all()
    pagination_class = None

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsMarketplaceAdmin()]

    def get_queryset(self):
        return catalog_store.list_cultivars()


class CultivarDetailView(generics.RetrieveUpdateAPIView):
    serializer_class = CultivarSerializer
    http_method_names = ['get', 'patch', 'head', 'options']

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsMarketplaceAdmin()]

    def get_object(self):
        return catalog_store.get_cultivar(self.kwargs['slug'])


# =============================================================================
# FARM PRODUCT MANAGEMENT
# =============================================================================

class FarmProductListCreateView(generics.GenericAPIView):
    """
    GET: all of the farm's products, active and retired
    POST: list a new product for the farm
    """
    permission_classes = [permissions.IsAuthenticated, IsFarmAccount]
    serializer_class = ProductDetailSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['status', 'product_type']

    def get(self, request):
        queryset = self.filter_queryset(catalog_store.products_for_farm(request.user.farm))
        page = self.paginate_queryset(queryset)
        serializer = ProductDetailSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def post(self, request):
        fields = _product_input(request)
        product = catalog_store.create_product(request.user, **fields)
        return Response(ProductDetailSerializer(product).data, status=status.HTTP_201_CREATED)


class FarmProductDetailView(APIView):
    """
    GET/PATCH a product of the farm's own. DELETE retires the listing;
    products are never removed because orders reference them.
    """
    permission_classes = [permissions.IsAuthenticated, IsFarmAccount]

    def get(self, request, pk):
        product = catalog_store.get_for_farm(request.user, pk)
        return Response(ProductDetailSerializer(product).data)

    def patch(self, request, pk):
        product = catalog_store.get_for_farm(request.user, pk)
        fields = _product_input(request, partial=True)
        product = catalog_store.update_product(request.user, product, dict(fields))
        return Response(ProductDetailSerializer(product).data)

    def delete(self, request, pk):
        product = catalog_store.get_for_farm(request.user, pk)
        product = catalog_store.retire(request.user, product)
        return Response({
            'message': 'Product retired',
            'product': ProductDetailSerializer(product).data,
        })


class FarmProductActivateView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsFarmAccount]

    def post(self, request, pk):
        product = catalog_store.get_for_farm(request.user, pk)
        product = catalog_store.reactivate(request.user, product)
        return Response(ProductDetailSerializer(product).data)

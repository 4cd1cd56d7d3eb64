"""
Order API Views

Buyers place, track, cancel and review their orders; farms see incoming
orders and advance them. All state changes go through OrderLifecycle.
"""

from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsFarmAccount
from orders.serializers import (
    OrderCancelSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    ReviewCreateSerializer,
    ReviewSerializer,
)
from orders.services import order_lifecycle


class OrderListCreateView(generics.GenericAPIView):
    """
    GET: the buyer's own orders, newest first
    POST: reserve stock and place an order
    """
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = OrderSerializer

    def get(self, request):
        queryset = order_lifecycle.orders_for_buyer(request.user)
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OrderSerializer(page, many=True).data)

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = order_lifecycle.place_order(
            request.user,
            product_id=data['product_id'],
            quantity=data['quantity'],
            delivery_address=data['delivery_address'],
            delivery_notes=data.get('delivery_notes', ''),
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class FarmOrderListView(generics.ListAPIView):
    """Incoming orders for the farm. Query param: status"""
    permission_classes = [permissions.IsAuthenticated, IsFarmAccount]
    serializer_class = OrderSerializer

    def get_queryset(self):
        return order_lifecycle.orders_for_farm(
            self.request.user,
            status=self.request.query_params.get('status'),
        )


class OrderDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        order = order_lifecycle.get_for_actor(request.user, pk)
        return Response(OrderSerializer(order).data)


class OrderStatusUpdateView(APIView):
    """
    Advance an order: {"status": "confirmed|shipped|delivered|cancelled",
    "tracking_number"?, "cancellation_reason"?}
    """
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = order_lifecycle.advance(
            request.user,
            pk,
            data['status'],
            tracking_number=data.get('tracking_number'),
            cancellation_reason=data.get('cancellation_reason'),
        )
        return Response(OrderSerializer(order).data)


class OrderCancelView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        serializer = OrderCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = order_lifecycle.get_for_actor(request.user, pk)
        order = order_lifecycle.cancel(request.user, order, reason=serializer.validated_data['reason'])
        return Response(OrderSerializer(order).data)


class OrderReviewView(APIView):
    """Buyer reviews a delivered order: {"rating": 1-5, "comment"?}"""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = order_lifecycle.submit_review(
            request.user,
            pk,
            rating=serializer.validated_data['rating'],
            comment=serializer.validated_data['comment'],
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

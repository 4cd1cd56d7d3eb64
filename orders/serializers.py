from django.conf import settings
from rest_framework import serializers

from orders.models import Order, OrderStatus, Review


class ReviewSerializer(serializers.ModelSerializer):
    buyer_name = serializers.CharField(source='buyer.get_full_name', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'order', 'farm', 'buyer_name', 'rating', 'comment', 'created_at']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order as seen by either party."""
    product_name = serializers.CharField(source='product.name', read_only=True)
    unit = serializers.CharField(source='product.unit', read_only=True)
    farm_name = serializers.CharField(source='farm.farm_name', read_only=True)
    buyer_name = serializers.CharField(source='buyer.get_full_name', read_only=True)
    buyer_email = serializers.EmailField(source='buyer.email', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    can_review = serializers.BooleanField(source='is_reviewable', read_only=True)
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number',
            'product', 'product_name', 'unit',
            'farm', 'farm_name',
            'buyer', 'buyer_name', 'buyer_email',
            'quantity', 'unit_price', 'total_price', 'currency',
            'status', 'status_display', 'can_review',
            'delivery_address', 'delivery_notes', 'tracking_number',
            'cancellation_reason', 'cancelled_by',
            'created_at', 'updated_at', 'confirmed_at',
            'shipped_at', 'delivered_at', 'cancelled_at',
        ]
        read_only_fields = fields

    def get_currency(self, obj):
        return settings.MARKETPLACE_CURRENCY


class OrderCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    delivery_address = serializers.CharField(allow_blank=True)
    delivery_notes = serializers.CharField(required=False, allow_blank=True, default='')


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    tracking_number = serializers.CharField(required=False, allow_blank=True, max_length=100)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True)


class OrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ReviewCreateSerializer(serializers.Serializer):
    rating = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_blank=True, default='')

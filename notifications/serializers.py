from rest_framework import serializers

from notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(
        source='related_order.order_number',
        read_only=True,
        default=None
    )

    class Meta:
        model = Notification
        fields = [
            'id', 'notification_type', 'title', 'message', 'read', 'read_at',
            'related_order', 'order_number', 'created_at'
        ]
        read_only_fields = fields

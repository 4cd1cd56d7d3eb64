from rest_framework import serializers

from farms.models import FarmProfile, FarmUpgradeRequest


class FarmProfileSerializer(serializers.ModelSerializer):
    """
    Public farm profile. rating is the display value; derived fields are
    never writable here.
    """
    rating = serializers.FloatField(source='display_rating', read_only=True)
    owner_name = serializers.CharField(source='owner.get_full_name', read_only=True)

    class Meta:
        model = FarmProfile
        fields = [
            'id', 'farm_name', 'farm_location', 'farm_description',
            'farm_image_url', 'verified', 'rating', 'total_reviews',
            'total_sales', 'owner_name', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class FarmDashboardSerializer(serializers.Serializer):
    total_products = serializers.IntegerField()
    active_products = serializers.IntegerField()
    total_orders = serializers.IntegerField()
    pending_orders = serializers.IntegerField()
    rating = serializers.FloatField()
    total_reviews = serializers.IntegerField()
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)


class FarmUpgradeRequestSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = FarmUpgradeRequest
        fields = [
            'id', 'user', 'user_email', 'farm_name', 'farm_location',
            'description', 'status', 'status_display', 'reviewed_at',
            'review_notes', 'created_at'
        ]
        read_only_fields = [
            'id', 'user', 'user_email', 'status', 'status_display',
            'reviewed_at', 'review_notes', 'created_at'
        ]


class UpgradeDecisionSerializer(serializers.Serializer):
    DECISION_CHOICES = [
        ('approve', 'Approve'),
        ('reject', 'Reject'),
    ]

    decision = serializers.ChoiceField(choices=DECISION_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class FarmProfileUpdateSerializer(serializers.Serializer):
    """
    Parses owner edits to the farm profile. Blank names are reported by
    FarmDirectory so API and service callers get the same message.
    """
    farm_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    farm_location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    farm_description = serializers.CharField(required=False, allow_blank=True)
    farm_image_url = serializers.URLField(required=False, allow_blank=True)

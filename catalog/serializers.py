from django.conf import settings
from rest_framework import serializers

from catalog.models import Cultivar, Product


class CultivarSerializer(serializers.ModelSerializer):

    class Meta:
        model = Cultivar
        fields = [
            'id', 'name', 'slug', 'thai_name', 'description',
            'characteristics', 'growing_conditions', 'uses', 'image_url',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class ProductListSerializer(serializers.ModelSerializer):
    """
    Catalog card: product plus the farm's display fields.
    Expects the queryset to select_related('farm').
    """
    is_active = serializers.BooleanField(read_only=True)
    farm_id = serializers.UUIDField(source='farm.id', read_only=True)
    farm_name = serializers.CharField(source='farm.farm_name', read_only=True)
    farm_location = serializers.CharField(source='farm.farm_location', read_only=True)
    farm_rating = serializers.FloatField(source='farm.display_rating', read_only=True)
    farm_verified = serializers.BooleanField(source='farm.verified', read_only=True)
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'product_type', 'price_per_unit', 'currency',
            'available_quantity', 'unit', 'harvest_date', 'expiry_date',
            'image_url', 'is_active',
            'farm_id', 'farm_name', 'farm_location', 'farm_rating', 'farm_verified',
        ]

    def get_currency(self, obj):
        return settings.MARKETPLACE_CURRENCY


class ProductDetailSerializer(ProductListSerializer):
    """
    Full product view. The farm is never writable; it comes from the
    authenticated farm account.
    """
    cultivar = CultivarSerializer(read_only=True)

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            'description', 'cultivar', 'status', 'retired_at',
            'created_at', 'updated_at',
        ]


class ProductWriteSerializer(serializers.Serializer):
    """
    Parses farm product input. Required fields and business rules are
    checked by CatalogStore so create and update share one set of rules.
    """
    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    product_type = serializers.CharField(required=False)
    cultivar = serializers.SlugRelatedField(
        slug_field='slug',
        queryset=Cultivar.objects.all(),
        required=False,
        allow_null=True
    )
    image_url = serializers.URLField(required=False, allow_blank=True)
    price_per_unit = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    available_quantity = serializers.IntegerField(required=False)
    unit = serializers.CharField(required=False, allow_blank=True, max_length=20)
    harvest_date = serializers.DateField(required=False)
    expiry_date = serializers.DateField(required=False, allow_null=True)

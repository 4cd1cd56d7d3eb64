"""
Catalog Models

Cultivar reference data and the product listings farms sell.
"""

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from decimal import Decimal
import uuid


class Cultivar(models.Model):
    """
    Banana variety reference record. Maintained by administrators.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    thai_name = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    characteristics = models.TextField(blank=True)
    growing_conditions = models.TextField(blank=True)
    uses = models.TextField(blank=True)
    image_url = models.URLField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cultivars'
        ordering = ['name']

    def __str__(self):
        return self.name


class ProductQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status=Product.ListingStatus.ACTIVE)

    def with_farm(self):
        return self.select_related('farm', 'cultivar')


class Product(models.Model):
    """
    Marketplace product listing.

    Each product belongs to one farm; only that farm's owner may manage it.
    Products are never deleted: retiring a listing hides it from the
    public catalog while historical orders keep pointing at it.
    """

    class ProductType(models.TextChoices):
        FRUIT = 'fruit', 'Fruit'
        SHOOT = 'shoot', 'Shoot'

    class ListingStatus(models.TextChoices):
        ACTIVE = 'active', 'Active'
        RETIRED = 'retired', 'Retired'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farm = models.ForeignKey(
        'farms.FarmProfile',
        on_delete=models.PROTECT,
        related_name='products',
        help_text='The farm that owns this product listing'
    )
    cultivar = models.ForeignKey(
        Cultivar,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products'
    )

    # Product Information
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    product_type = models.CharField(
        max_length=10,
        choices=ProductType.choices,
        db_index=True
    )
    image_url = models.URLField(blank=True)

    # Pricing and inventory
    price_per_unit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    available_quantity = models.PositiveIntegerField(default=0)
    unit = models.CharField(max_length=20, default='kg')

    # Freshness
    harvest_date = models.DateField()
    expiry_date = models.DateField(null=True, blank=True)

    # Listing lifecycle
    status = models.CharField(
        max_length=10,
        choices=ListingStatus.choices,
        default=ListingStatus.ACTIVE,
        db_index=True
    )
    retired_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    # Fields a farm may set through CatalogStore.create_product/update_product
    EDITABLE_FIELDS = (
        'name', 'description', 'product_type', 'cultivar', 'image_url',
        'price_per_unit', 'available_quantity', 'unit',
        'harvest_date', 'expiry_date',
    )

    class Meta:
        db_table = 'products'
        ordering = ['harvest_date']
        indexes = [
            models.Index(fields=['status', 'harvest_date']),
            models.Index(fields=['farm', 'status']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(price_per_unit__gt=0),
                name='product_price_positive'
            ),
            models.CheckConstraint(
                condition=Q(available_quantity__gte=0),
                name='product_quantity_non_negative'
            ),
            models.CheckConstraint(
                condition=Q(expiry_date__isnull=True) | Q(expiry_date__gte=F('harvest_date')),
                name='product_expiry_after_harvest'
            ),
        ]

    def __str__(self):
        return f"{self.name} - {self.farm.farm_name}"

    @property
    def is_active(self):
        return self.status == self.ListingStatus.ACTIVE

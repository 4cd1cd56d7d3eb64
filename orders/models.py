"""
Order Lifecycle Models

Order state machine:

    pending -> confirmed -> shipped -> delivered -> reviewed
    pending | confirmed -> cancelled

Status changes go through orders.services.OrderLifecycle, which writes
them with compare-and-set updates. Orders are never deleted.
"""

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.crypto import get_random_string
import uuid

# Excludes 0/O and 1/I/L
ORDER_NUMBER_CHARS = '23456789ABCDEFGHJKMNPQRSTUVWXYZ'


class OrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    SHIPPED = 'shipped', 'Shipped'
    DELIVERED = 'delivered', 'Delivered'
    REVIEWED = 'reviewed', 'Reviewed'
    CANCELLED = 'cancelled', 'Cancelled'


# Allowed status changes, keyed by current status
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.REVIEWED},
    OrderStatus.REVIEWED: set(),
    OrderStatus.CANCELLED: set(),
}

# Lifecycle timestamp written when an order enters a status
TIMESTAMP_FIELDS = {
    OrderStatus.CONFIRMED: 'confirmed_at',
    OrderStatus.SHIPPED: 'shipped_at',
    OrderStatus.DELIVERED: 'delivered_at',
    OrderStatus.CANCELLED: 'cancelled_at',
}


def can_transition(current, target):
    return target in ALLOWED_TRANSITIONS.get(current, set())


class Order(models.Model):
    """
    A buyer's order for a quantity of one product from one farm.

    unit_price and total_price are frozen at creation; later price edits on
    the product never change them.
    """

    class CancelledBy(models.TextChoices):
        BUYER = 'buyer', 'Buyer'
        FARM = 'farm', 'Farm'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=20, unique=True, editable=False)

    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='orders'
    )
    farm = models.ForeignKey(
        'farms.FarmProfile',
        on_delete=models.PROTECT,
        related_name='orders'
    )
    buyer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='orders'
    )

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True
    )

    # Delivery
    delivery_address = models.TextField()
    delivery_notes = models.TextField(blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)

    # Cancellation
    cancellation_reason = models.TextField(blank=True)
    cancelled_by = models.CharField(
        max_length=10,
        choices=CancelledBy.choices,
        blank=True
    )

    # Lifecycle timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['buyer', '-created_at']),
            models.Index(fields=['farm', 'status']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name='order_quantity_positive'
            ),
        ]

    def __str__(self):
        return f"{self.order_number} - {self.get_status_display()}"

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = self._generate_order_number()
        super().save(*args, **kwargs)

    def _generate_order_number(self):
        """Generate unique order number: ORD-YYYYMMDD-XXXXX"""
        date_part = timezone.now().strftime('%Y%m%d')
        while True:
            random_part = get_random_string(5, allowed_chars=ORDER_NUMBER_CHARS)
            order_number = f"ORD-{date_part}-{random_part}"
            if not Order.objects.filter(order_number=order_number).exists():
                return order_number

    @property
    def is_reviewable(self):
        return self.status == OrderStatus.DELIVERED


class Review(models.Model):
    """
    Buyer's review of a delivered order. Immutable once created.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name='review'
    )
    farm = models.ForeignKey(
        'farms.FarmProfile',
        on_delete=models.PROTECT,
        related_name='reviews'
    )
    buyer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='reviews'
    )

    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(rating__gte=1) & Q(rating__lte=5),
                name='review_rating_range'
            ),
        ]

    def __str__(self):
        return f"{self.order.order_number} - {self.rating}/5"

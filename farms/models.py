"""
Farm Directory Models

- FarmProfile: the selling side of a farm account (one per account)
- FarmUpgradeRequest: a buyer account asking to become a farm account
"""

from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from accounts.models import User
import uuid


# =============================================================================
# FARM PROFILE
# =============================================================================

class FarmProfile(models.Model):
    """
    Public profile of a farm seller.

    rating, total_reviews and total_sales are derived from the farm's
    reviews and are only written by orders.ratings.recompute_farm_rating().
    verified is only written by administrators.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.OneToOneField(
        User,
        on_delete=models.PROTECT,
        related_name='farm_profile'
    )

    # Owner-editable profile fields
    farm_name = models.CharField(max_length=200, db_index=True)
    farm_location = models.CharField(max_length=255)
    farm_description = models.TextField(blank=True)
    farm_image_url = models.URLField(blank=True)

    # Admin-controlled
    verified = models.BooleanField(default=False, db_index=True)

    # Derived aggregate (recomputed from reviews)
    rating = models.FloatField(
        default=0.0,
        validators=[MinValueValidator(0.0), MaxValueValidator(5.0)],
        help_text="Mean review rating, full precision"
    )
    total_reviews = models.PositiveIntegerField(default=0)
    total_sales = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Sum of total_price over reviewed orders"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Fields an owner may change through FarmDirectory.update_profile()
    EDITABLE_FIELDS = ('farm_name', 'farm_location', 'farm_description', 'farm_image_url')
    DERIVED_FIELDS = ('rating', 'total_reviews', 'total_sales')

    class Meta:
        db_table = 'farm_profiles'
        ordering = ['farm_name']
        verbose_name = 'Farm Profile'
        verbose_name_plural = 'Farm Profiles'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating__gte=0) & models.Q(rating__lte=5),
                name='farm_rating_range'
            ),
        ]

    def __str__(self):
        return self.farm_name

    @property
    def display_rating(self):
        """Rating rounded to one decimal for display."""
        return round(self.rating, 1)


# =============================================================================
# UPGRADE REQUESTS
# =============================================================================

class FarmUpgradeRequest(models.Model):
    """
    A buyer account's request to become a farm account.
    Approval creates the FarmProfile and switches the account role to farm.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='farm_upgrade_requests'
    )
    farm_name = models.CharField(max_length=200)
    farm_location = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    reviewed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_upgrade_requests'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'farm_upgrade_requests'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user'],
                condition=models.Q(status='pending'),
                name='one_pending_upgrade_request_per_user'
            ),
        ]

    def __str__(self):
        return f"{self.farm_name} ({self.get_status_display()})"

"""
Farm rating aggregate.

A farm's rating, total_reviews and total_sales are always recomputed from
its full review set, with the farm row locked so concurrent reviews for the
same farm serialize on the recompute.
"""

from decimal import Decimal

from django.db import transaction
from django.db.models import Avg, Count, Sum
import logging

from farms.models import FarmProfile
from orders.models import Review

logger = logging.getLogger(__name__)


def recompute_farm_rating(farm_id):
    with transaction.atomic():
        farm = FarmProfile.objects.select_for_update().get(pk=farm_id)

        stats = Review.objects.filter(farm_id=farm_id).aggregate(
            average=Avg('rating'),
            count=Count('id'),
            sales=Sum('order__total_price'),
        )

        farm.rating = float(stats['average'] or 0.0)
        farm.total_reviews = stats['count']
        farm.total_sales = stats['sales'] or Decimal('0.00')
        farm.save(update_fields=['rating', 'total_reviews', 'total_sales', 'updated_at'])

    logger.info(
        f"Farm {farm_id} rating recomputed: {farm.display_rating} "
        f"from {farm.total_reviews} reviews"
    )
    return farm

"""
Review & Rating Aggregate Tests

Run with: pytest tests/integration/test_reviews_ratings.py -v
"""

import pytest
from decimal import Decimal

from core.exceptions import InvalidTransition, Unauthorized, ValidationFailed
from farms.models import FarmProfile
from orders.models import OrderStatus, Review
from orders.ratings import recompute_farm_rating


@pytest.fixture
def delivered_order(place_order, advance_to):
    def _delivered(**kwargs):
        return advance_to(place_order(**kwargs), OrderStatus.DELIVERED)
    return _delivered


@pytest.mark.django_db
class TestReviewGate:

    @pytest.mark.parametrize('status', ['pending', 'confirmed', 'shipped'])
    def test_review_requires_delivered(self, lifecycle, place_order, advance_to, buyer, status):
        order = place_order()
        if status != 'pending':
            advance_to(order, status)

        with pytest.raises(InvalidTransition):
            lifecycle.submit_review(buyer, order.pk, rating=4)

        order.refresh_from_db()
        assert order.status == status
        assert not Review.objects.exists()

    def test_review_of_cancelled_order_rejected(self, lifecycle, place_order, buyer):
        order = place_order()
        lifecycle.cancel(buyer, order)

        with pytest.raises(InvalidTransition):
            lifecycle.submit_review(buyer, order.pk, rating=4)

    def test_review_moves_order_to_reviewed(self, lifecycle, delivered_order, buyer):
        order = delivered_order()

        review = lifecycle.submit_review(buyer, order.pk, rating=4, comment='  Sweet and ripe  ')

        order.refresh_from_db()
        assert order.status == OrderStatus.REVIEWED
        assert review.comment == 'Sweet and ripe'
        assert review.farm_id == order.farm_id

    def test_second_review_rejected(self, lifecycle, delivered_order, buyer, farm):
        order = delivered_order()
        lifecycle.submit_review(buyer, order.pk, rating=5)

        with pytest.raises(InvalidTransition):
            lifecycle.submit_review(buyer, order.pk, rating=1)

        farm.refresh_from_db()
        assert Review.objects.count() == 1
        assert farm.rating == 5.0

    def test_only_buyer_may_review(self, lifecycle, delivered_order, farm_user):
        order = delivered_order()

        with pytest.raises(Unauthorized):
            lifecycle.submit_review(farm_user, order.pk, rating=5)

    @pytest.mark.parametrize('rating', [0, 6, 'great'])
    def test_rating_must_be_one_to_five(self, lifecycle, delivered_order, buyer, rating):
        order = delivered_order()

        with pytest.raises(ValidationFailed):
            lifecycle.submit_review(buyer, order.pk, rating=rating)

        order.refresh_from_db()
        assert order.status == OrderStatus.DELIVERED


@pytest.mark.django_db
class TestRatingAggregate:

    def test_rating_is_mean_of_all_reviews(self, lifecycle, delivered_order, buyer, farm):
        for rating in (5, 4, 4):
            order = delivered_order(quantity=1)
            lifecycle.submit_review(buyer, order.pk, rating=rating)

        farm.refresh_from_db()
        assert farm.rating == pytest.approx(13 / 3)
        assert farm.display_rating == 4.3
        assert farm.total_reviews == 3
        assert farm.total_sales == Decimal('150.00')

    def test_recompute_corrects_drifted_values(self, lifecycle, delivered_order, buyer, farm):
        order = delivered_order(quantity=2)
        lifecycle.submit_review(buyer, order.pk, rating=3)
        FarmProfile.objects.filter(pk=farm.pk).update(rating=1.0, total_reviews=40, total_sales=0)

        recompute_farm_rating(farm.pk)

        farm.refresh_from_db()
        assert farm.rating == 3.0
        assert farm.total_reviews == 1
        assert farm.total_sales == Decimal('100.00')

    def test_reviews_of_other_farms_do_not_count(self, lifecycle, delivered_order, buyer, farm, other_farm):
        order = delivered_order()
        lifecycle.submit_review(buyer, order.pk, rating=2)

        other_farm.refresh_from_db()
        assert other_farm.total_reviews == 0
        assert other_farm.rating == 0.0

    def test_farm_without_reviews_resets_to_zero(self, farm):
        recompute_farm_rating(farm.pk)

        farm.refresh_from_db()
        assert farm.rating == 0.0
        assert farm.total_reviews == 0
        assert farm.total_sales == Decimal('0.00')

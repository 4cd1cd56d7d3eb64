"""
Order Lifecycle Tests

Tests cover:
1. Placing orders: stock reservation, frozen pricing, validation
2. The status machine: every allowed transition and rejection of the rest
3. Cancellation policy and exact stock restoration
4. Ownership checks
5. The end-to-end happy path

Run with: pytest tests/integration/test_order_lifecycle.py -v
"""

import pytest
from decimal import Decimal
from unittest.mock import patch
from django.test import override_settings

from catalog.models import Product
from core.exceptions import (
    InsufficientStock,
    InvalidTransition,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from orders.models import ALLOWED_TRANSITIONS, Order, OrderStatus


# =============================================================================
# PLACING ORDERS
# =============================================================================

@pytest.mark.django_db
class TestPlaceOrder:

    def test_order_starts_pending_and_reserves_stock(self, place_order, product):
        order = place_order(quantity=3)

        product.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert product.available_quantity == 7
        assert order.farm == product.farm
        assert order.order_number.startswith('ORD-')

    def test_total_price_is_quantity_times_price(self, place_order):
        order = place_order(quantity=2)

        assert order.unit_price == Decimal('50.00')
        assert order.total_price == Decimal('100.00')

    def test_order_number_regenerated_on_collision(self, place_order):
        with patch('orders.models.get_random_string', side_effect=['AB234', 'AB234', 'CD567']):
            first = place_order(quantity=1)
            second = place_order(quantity=1)

        assert first.order_number.endswith('-AB234')
        assert second.order_number.endswith('-CD567')

    def test_total_price_frozen_after_price_edit(self, place_order, product):
        order = place_order(quantity=2)

        Product.objects.filter(pk=product.pk).update(price_per_unit=Decimal('80.00'))

        order.refresh_from_db()
        assert order.total_price == Decimal('100.00')
        assert order.unit_price == Decimal('50.00')

    def test_insufficient_stock_creates_no_order(self, place_order, product):
        with pytest.raises(InsufficientStock):
            place_order(quantity=11)

        product.refresh_from_db()
        assert product.available_quantity == 10
        assert Order.objects.count() == 0

    def test_retired_product_cannot_be_ordered(self, place_order, product):
        Product.objects.filter(pk=product.pk).update(status=Product.ListingStatus.RETIRED)

        with pytest.raises(NotFound):
            place_order()

    def test_delivery_address_required(self, lifecycle, buyer, product):
        with pytest.raises(ValidationFailed):
            lifecycle.place_order(buyer, product.pk, 1, delivery_address='   ')

        product.refresh_from_db()
        assert product.available_quantity == 10

    @override_settings(MAX_ORDER_QUANTITY=5)
    def test_quantity_capped_by_setting(self, place_order):
        with pytest.raises(ValidationFailed):
            place_order(quantity=6)

    def test_farm_cannot_order_own_product(self, place_order, farm_user):
        with pytest.raises(ValidationFailed):
            place_order(order_buyer=farm_user)

    def test_failed_order_write_rolls_back_reservation(self, place_order, product):
        from django.db import IntegrityError

        with patch('orders.services.Order.objects.create', side_effect=IntegrityError('boom')):
            with pytest.raises(IntegrityError):
                place_order(quantity=4)

        product.refresh_from_db()
        assert product.available_quantity == 10


# =============================================================================
# STATUS MACHINE
# =============================================================================

@pytest.mark.django_db
class TestTransitions:

    def test_confirm_sets_timestamp(self, lifecycle, place_order, farm_user):
        order = place_order()

        lifecycle.confirm(farm_user, order)

        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED
        assert order.confirmed_at is not None
        assert order.shipped_at is None

    def test_ship_attaches_tracking_number(self, lifecycle, place_order, farm_user, advance_to):
        order = advance_to(place_order(), OrderStatus.CONFIRMED)

        lifecycle.ship(farm_user, order, tracking_number='TH123')

        order.refresh_from_db()
        assert order.status == OrderStatus.SHIPPED
        assert order.tracking_number == 'TH123'

    def test_numeric_tracking_number_is_stored_as_text(self, lifecycle, place_order, farm_user, advance_to):
        order = advance_to(place_order(), OrderStatus.CONFIRMED)

        lifecycle.ship(farm_user, order, tracking_number=4455667788)

        order.refresh_from_db()
        assert order.tracking_number == '4455667788'

    def test_timestamps_follow_lifecycle_order(self, place_order, advance_to):
        order = advance_to(place_order(), OrderStatus.DELIVERED)

        order.refresh_from_db()
        assert order.created_at <= order.confirmed_at <= order.shipped_at <= order.delivered_at
        assert order.cancelled_at is None

    def test_double_confirm_rejected(self, lifecycle, place_order, farm_user):
        order = place_order()
        lifecycle.confirm(farm_user, order)

        with pytest.raises(InvalidTransition):
            lifecycle.confirm(farm_user, order)

    def test_cannot_skip_states(self, lifecycle, place_order, farm_user):
        order = place_order()

        with pytest.raises(InvalidTransition):
            lifecycle.ship(farm_user, order)
        with pytest.raises(InvalidTransition):
            lifecycle.deliver(farm_user, order)

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert order.shipped_at is None

    def test_stale_copy_cannot_overwrite_concurrent_change(self, lifecycle, place_order, farm_user, buyer):
        order = place_order()
        stale = Order.objects.get(pk=order.pk)

        lifecycle.cancel(buyer, order, reason='Changed my mind')

        with pytest.raises(InvalidTransition):
            lifecycle.confirm(farm_user, stale)

        stale.refresh_from_db()
        assert stale.status == OrderStatus.CANCELLED
        assert stale.confirmed_at is None

    @pytest.mark.parametrize('current', list(OrderStatus.values))
    @pytest.mark.parametrize('target', ['pending', 'confirmed', 'shipped', 'delivered', 'cancelled'])
    def test_advance_only_follows_table(self, lifecycle, place_order, farm_user, current, target):
        order = place_order()
        Order.objects.filter(pk=order.pk).update(status=current)

        if target in ALLOWED_TRANSITIONS[current]:
            result = lifecycle.advance(farm_user, order.pk, target)
            assert result.status == target
        else:
            with pytest.raises(InvalidTransition):
                lifecycle.advance(farm_user, order.pk, target)
            order.refresh_from_db()
            assert order.status == current

    def test_advance_unknown_status(self, lifecycle, place_order, farm_user):
        order = place_order()

        with pytest.raises(ValidationFailed):
            lifecycle.advance(farm_user, order.pk, 'lost')


# =============================================================================
# CANCELLATION
# =============================================================================

@pytest.mark.django_db
class TestCancellation:

    def test_buyer_cancels_pending_order_and_stock_returns(self, lifecycle, place_order, buyer, product):
        order = place_order(quantity=4)

        lifecycle.cancel(buyer, order, reason='Ordered by mistake')

        product.refresh_from_db()
        order.refresh_from_db()
        assert product.available_quantity == 10
        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_at is not None
        assert order.cancellation_reason == 'Ordered by mistake'
        assert order.cancelled_by == Order.CancelledBy.BUYER

    def test_farm_cancels_confirmed_order(self, lifecycle, place_order, farm_user, product, advance_to):
        order = advance_to(place_order(quantity=3), OrderStatus.CONFIRMED)

        lifecycle.cancel(farm_user, order, reason='Storm damage')

        product.refresh_from_db()
        assert product.available_quantity == 10
        assert order.cancelled_by == Order.CancelledBy.FARM

    def test_restores_exact_reserved_quantity_after_product_edits(self, lifecycle, place_order, buyer, product):
        order = place_order(quantity=4)
        Product.objects.filter(pk=product.pk).update(
            available_quantity=50,
            price_per_unit=Decimal('10.00'),
        )

        lifecycle.cancel(buyer, order)

        product.refresh_from_db()
        assert product.available_quantity == 54

    def test_cancel_restores_stock_of_retired_product(self, lifecycle, place_order, buyer, farm_user, product):
        from catalog.services import CatalogStore

        order = place_order(quantity=4)
        CatalogStore().retire(farm_user, product)

        lifecycle.cancel(buyer, order)

        product.refresh_from_db()
        assert product.available_quantity == 10
        assert not product.is_active

    def test_buyer_cannot_cancel_confirmed_order(self, lifecycle, place_order, buyer, product, advance_to):
        order = advance_to(place_order(quantity=2), OrderStatus.CONFIRMED)

        with pytest.raises(InvalidTransition):
            lifecycle.cancel(buyer, order)

        product.refresh_from_db()
        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED
        assert product.available_quantity == 8

    def test_cancelling_shipped_order_rejected(self, lifecycle, place_order, buyer, farm_user, product, advance_to):
        order = advance_to(place_order(quantity=2), OrderStatus.SHIPPED)

        for actor in (buyer, farm_user):
            with pytest.raises(InvalidTransition):
                lifecycle.cancel(actor, order, reason='Too late')

        order.refresh_from_db()
        product.refresh_from_db()
        assert order.status == OrderStatus.SHIPPED
        assert order.cancelled_at is None
        assert order.cancellation_reason == ''
        assert product.available_quantity == 8

    def test_cancelling_twice_restores_once(self, lifecycle, place_order, buyer, product):
        order = place_order(quantity=2)
        lifecycle.cancel(buyer, order)

        with pytest.raises(InvalidTransition):
            lifecycle.cancel(buyer, order)

        product.refresh_from_db()
        assert product.available_quantity == 10


# =============================================================================
# OWNERSHIP
# =============================================================================

@pytest.mark.django_db
class TestOwnership:

    def test_buyer_cannot_confirm(self, lifecycle, place_order, buyer):
        order = place_order()

        with pytest.raises(Unauthorized):
            lifecycle.confirm(buyer, order)

    def test_other_farm_cannot_ship(self, lifecycle, place_order, other_farm_user, other_farm, advance_to):
        order = advance_to(place_order(), OrderStatus.CONFIRMED)

        with pytest.raises(Unauthorized):
            lifecycle.ship(other_farm_user, order)

    def test_stranger_cannot_cancel(self, lifecycle, place_order, other_buyer):
        order = place_order()

        with pytest.raises(Unauthorized):
            lifecycle.cancel(other_buyer, order)

    def test_stranger_cannot_view(self, lifecycle, place_order, other_buyer):
        order = place_order()

        with pytest.raises(Unauthorized):
            lifecycle.get_for_actor(other_buyer, order.pk)

    def test_admin_can_view(self, lifecycle, place_order, admin_user):
        order = place_order()

        assert lifecycle.get_for_actor(admin_user, order.pk) == order

    def test_orders_for_farm_filters_by_status(self, lifecycle, place_order, farm_user, buyer, other_buyer):
        first = place_order()
        place_order(order_buyer=other_buyer)
        lifecycle.confirm(farm_user, first)

        assert list(lifecycle.orders_for_farm(farm_user, status='confirmed')) == [first]
        assert lifecycle.orders_for_farm(farm_user).count() == 2

    def test_orders_for_farm_requires_farm(self, lifecycle, buyer):
        with pytest.raises(Unauthorized):
            lifecycle.orders_for_farm(buyer)

    def test_orders_for_buyer_only_returns_own(self, lifecycle, place_order, buyer, other_buyer):
        mine = place_order()
        place_order(order_buyer=other_buyer)

        assert list(lifecycle.orders_for_buyer(buyer)) == [mine]


# =============================================================================
# END TO END
# =============================================================================

@pytest.mark.django_db
class TestHappyPath:

    def test_order_from_reservation_to_review(self, lifecycle, buyer, farm_user, farm, make_product):
        product = make_product(price_per_unit=Decimal('50'), available_quantity=5)

        order = lifecycle.place_order(buyer, product.pk, 2, delivery_address='Bangkok')
        assert order.total_price == Decimal('100')

        lifecycle.confirm(farm_user, order)
        assert order.status == OrderStatus.CONFIRMED
        assert order.confirmed_at is not None

        lifecycle.ship(farm_user, order, tracking_number='TRK1')
        assert order.status == OrderStatus.SHIPPED

        lifecycle.deliver(farm_user, order)
        assert order.status == OrderStatus.DELIVERED

        review = lifecycle.submit_review(buyer, order.pk, rating=5)

        order.refresh_from_db()
        farm.refresh_from_db()
        product.refresh_from_db()
        assert order.status == OrderStatus.REVIEWED
        assert review.rating == 5
        assert farm.rating == 5.0
        assert farm.total_reviews == 1
        assert farm.total_sales == Decimal('100.00')
        assert product.available_quantity == 3

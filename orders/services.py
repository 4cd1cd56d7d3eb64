"""
Order Lifecycle Service

Creates orders against the catalog and moves them through the status
machine defined in orders.models. Every status write is a compare-and-set
on the current status inside a transaction, so a stale or concurrent
change fails with InvalidTransition instead of overwriting.
"""

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
import logging

from accounts.policies import OrderPolicy, require
from catalog.services import CatalogStore
from core.exceptions import (
    InvalidTransition,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from notifications.services import NotificationFeed
from orders.models import (
    Order,
    OrderStatus,
    Review,
    TIMESTAMP_FIELDS,
    can_transition,
)
from orders.ratings import recompute_farm_rating

logger = logging.getLogger(__name__)


def _whole_number(value, field, low, high):
    if isinstance(value, bool):
        raise ValidationFailed(f"{field} must be a whole number.", field=field)
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a whole number.", field=field)
    if number < low or number > high:
        raise ValidationFailed(f"{field} must be between {low} and {high}.", field=field)
    return number


class OrderLifecycle:
    """Service for placing and progressing orders"""

    def __init__(self):
        self.catalog = CatalogStore()
        self.notifications = NotificationFeed()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _queryset(self):
        return Order.objects.select_related('product', 'farm', 'farm__owner', 'buyer')

    def get_for_actor(self, actor, order_id):
        """An order visible to actor as its buyer, its farm or an admin."""
        try:
            order = self._queryset().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise NotFound("Order not found.")

        require(actor, 'view', order, "You do not have access to this order.")
        return order

    def orders_for_buyer(self, buyer):
        return OrderPolicy.scope(buyer, self._queryset()).order_by('-created_at')

    def orders_for_farm(self, actor, status=None):
        farm = actor.farm if actor.is_authenticated else None
        if farm is None:
            raise Unauthorized("Only farm accounts have incoming orders.")

        queryset = self._queryset().filter(farm=farm)
        if status and status != 'all':
            if status not in OrderStatus.values:
                raise ValidationFailed(f"Unknown order status '{status}'.", field='status')
            queryset = queryset.filter(status=status)
        return queryset.order_by('-created_at')

    # -------------------------------------------------------------------------
    # Placing orders
    # -------------------------------------------------------------------------

    def place_order(self, buyer, product_id, quantity, delivery_address, delivery_notes=''):
        """
        Reserve stock and create a pending order.

        unit_price and total_price are captured from the product now and
        never recomputed.
        """
        if buyer is None or not buyer.is_authenticated:
            raise Unauthorized("Sign in to place an order.")

        quantity = _whole_number(quantity, 'quantity', 1, settings.MAX_ORDER_QUANTITY)
        delivery_address = (delivery_address or '').strip()
        if not delivery_address:
            raise ValidationFailed("Delivery address is required.", field='delivery_address')

        product = self.catalog.get_by_id(product_id)
        if product.farm.owner_id == buyer.pk:
            raise ValidationFailed("You cannot order your own products.")

        with transaction.atomic():
            product = self.catalog.reserve(product.pk, quantity)

            order = Order.objects.create(
                product=product,
                farm=product.farm,
                buyer=buyer,
                quantity=quantity,
                unit_price=product.price_per_unit,
                total_price=product.price_per_unit * quantity,
                delivery_address=delivery_address,
                delivery_notes=(delivery_notes or '').strip(),
            )

            self.notifications.order_placed(order)

        logger.info(
            f"Order {order.order_number} placed by {buyer.pk}: "
            f"{quantity} x {product.name} = {order.total_price}"
        )
        return order

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _transition(self, order, target, **changes):
        """
        Move order to target if the table allows it and nobody changed the
        status in the meantime. Must run inside a transaction.
        """
        expected = order.status
        if not can_transition(expected, target):
            raise InvalidTransition(
                f"Cannot change order from {expected} to {target}.",
                current_status=expected,
            )

        now = timezone.now()
        timestamp_field = TIMESTAMP_FIELDS.get(target)
        if timestamp_field:
            changes[timestamp_field] = now

        updated = Order.objects.filter(pk=order.pk, status=expected).update(
            status=target,
            updated_at=now,
            **changes
        )
        if not updated:
            raise InvalidTransition(
                "This order was updated by someone else. Refresh and try again.",
                current_status=Order.objects.values_list('status', flat=True).get(pk=order.pk),
            )

        for field, value in changes.items():
            setattr(order, field, value)
        order.status = target
        order.updated_at = now

        logger.info(f"Order {order.order_number}: {expected} -> {target}")
        return order

    @transaction.atomic
    def confirm(self, actor, order):
        require(actor, 'fulfil', order, "Only the selling farm can confirm this order.")
        self._transition(order, OrderStatus.CONFIRMED)
        self.notifications.order_confirmed(order)
        return order

    @transaction.atomic
    def ship(self, actor, order, tracking_number=None):
        require(actor, 'fulfil', order, "Only the selling farm can ship this order.")
        changes = {}
        if tracking_number:
            changes['tracking_number'] = str(tracking_number).strip()
        self._transition(order, OrderStatus.SHIPPED, **changes)
        self.notifications.order_shipped(order)
        return order

    @transaction.atomic
    def deliver(self, actor, order):
        require(actor, 'fulfil', order, "Only the selling farm can mark this order delivered.")
        self._transition(order, OrderStatus.DELIVERED)
        self.notifications.order_delivered(order)
        return order

    @transaction.atomic
    def cancel(self, actor, order, reason=''):
        """
        Cancel a pending or confirmed order and put its quantity back.

        The farm may cancel while pending or confirmed; the buyer only
        while pending.
        """
        require(actor, 'cancel', order, "You cannot cancel this order.")

        if OrderPolicy.is_seller(actor, order):
            cancelled_by = Order.CancelledBy.FARM
        else:
            cancelled_by = Order.CancelledBy.BUYER
            if order.status == OrderStatus.CONFIRMED:
                raise InvalidTransition(
                    "The farm has already confirmed this order. Contact the farm to cancel it.",
                    current_status=order.status,
                )

        self._transition(
            order,
            OrderStatus.CANCELLED,
            cancellation_reason=(reason or '').strip(),
            cancelled_by=cancelled_by,
        )
        self.catalog.release(order.product_id, order.quantity)
        self.notifications.order_cancelled(order)
        return order

    def advance(self, actor, order_id, target_status, tracking_number=None, cancellation_reason=None):
        """Dispatch a requested status change to the matching transition."""
        order = self.get_for_actor(actor, order_id)

        if target_status == OrderStatus.CONFIRMED:
            return self.confirm(actor, order)
        if target_status == OrderStatus.SHIPPED:
            return self.ship(actor, order, tracking_number=tracking_number)
        if target_status == OrderStatus.DELIVERED:
            return self.deliver(actor, order)
        if target_status == OrderStatus.CANCELLED:
            return self.cancel(actor, order, reason=cancellation_reason)
        if target_status in OrderStatus.values:
            raise InvalidTransition(
                f"Cannot change order from {order.status} to {target_status}.",
                current_status=order.status,
            )
        raise ValidationFailed(f"Unknown order status '{target_status}'.", field='status')

    # -------------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------------

    def submit_review(self, actor, order_id, rating, comment=''):
        """
        Review a delivered order. Moves it to reviewed and refreshes the
        farm's rating aggregate.
        """
        order = self.get_for_actor(actor, order_id)
        require(actor, 'review', order, "Only the buyer can review this order.")
        rating = _whole_number(rating, 'rating', 1, 5)

        try:
            with transaction.atomic():
                self._transition(order, OrderStatus.REVIEWED)
                review = Review.objects.create(
                    order=order,
                    farm=order.farm,
                    buyer=order.buyer,
                    rating=rating,
                    comment=(comment or '').strip(),
                )
                recompute_farm_rating(order.farm_id)
                self.notifications.review_received(review)
        except IntegrityError:
            raise InvalidTransition("This order has already been reviewed.")

        logger.info(f"Order {order.order_number} reviewed with {rating}/5")
        return review


order_lifecycle = OrderLifecycle()

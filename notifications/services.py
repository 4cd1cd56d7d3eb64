"""
Notification Feed Service

Stores in-app notifications for order lifecycle events and upgrade
decisions. Writing a notification never breaks the operation that raised
it: each write runs in its own savepoint and storage failures are logged.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone
import logging

from accounts.policies import NotificationPolicy, require
from core.exceptions import NotFound
from notifications.models import Notification

logger = logging.getLogger(__name__)

NotificationType = Notification.NotificationType


class NotificationFeed:
    """Service for creating and reading user notifications"""

    def notify(self, recipient, notification_type, title, message, order=None):
        """
        Store one notification for recipient.

        Returns the Notification, or None if it could not be stored.
        """
        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    recipient=recipient,
                    notification_type=notification_type,
                    title=title,
                    message=message,
                    related_order=order,
                )
        except DatabaseError:
            logger.exception(
                f"Failed to store {notification_type} notification for user {recipient.pk}"
            )
            return None

        logger.info(f"Notification {notification_type} created for user {recipient.pk}")
        return notification

    # -------------------------------------------------------------------------
    # Order lifecycle events
    # -------------------------------------------------------------------------

    def order_placed(self, order):
        return self.notify(
            recipient=order.farm.owner,
            notification_type=NotificationType.NEW_ORDER,
            title=f"New order {order.order_number}",
            message=(
                f"{order.buyer.get_full_name()} reserved {order.quantity} "
                f"{order.product.unit} of {order.product.name}."
            ),
            order=order,
        )

    def order_confirmed(self, order):
        return self.notify(
            recipient=order.buyer,
            notification_type=NotificationType.ORDER_CONFIRMED,
            title=f"Order {order.order_number} confirmed",
            message=f"{order.farm.farm_name} confirmed your order for {order.product.name}.",
            order=order,
        )

    def order_shipped(self, order):
        message = f"Your order for {order.product.name} is on its way."
        if order.tracking_number:
            message += f" Tracking number: {order.tracking_number}."
        return self.notify(
            recipient=order.buyer,
            notification_type=NotificationType.ORDER_SHIPPED,
            title=f"Order {order.order_number} shipped",
            message=message,
            order=order,
        )

    def order_delivered(self, order):
        return self.notify(
            recipient=order.buyer,
            notification_type=NotificationType.ORDER_DELIVERED,
            title=f"Order {order.order_number} delivered",
            message=f"Your order from {order.farm.farm_name} was delivered. You can now leave a review.",
            order=order,
        )

    def order_cancelled(self, order):
        """Notify whichever party did not cancel."""
        if order.cancelled_by == order.CancelledBy.BUYER:
            recipient = order.farm.owner
            who = order.buyer.get_full_name()
        else:
            recipient = order.buyer
            who = order.farm.farm_name

        message = f"{who} cancelled order {order.order_number} for {order.product.name}."
        if order.cancellation_reason:
            message += f" Reason: {order.cancellation_reason}"

        return self.notify(
            recipient=recipient,
            notification_type=NotificationType.ORDER_CANCELLED,
            title=f"Order {order.order_number} cancelled",
            message=message,
            order=order,
        )

    def review_received(self, review):
        return self.notify(
            recipient=review.farm.owner,
            notification_type=NotificationType.NEW_REVIEW,
            title=f"New {review.rating}-star review",
            message=f"{review.buyer.get_full_name()} reviewed order {review.order.order_number}.",
            order=review.order,
        )

    def upgrade_decided(self, upgrade_request):
        if upgrade_request.status == upgrade_request.Status.APPROVED:
            title = "Farm account approved"
            message = f"{upgrade_request.farm_name} is now open for selling."
        else:
            title = "Farm account request declined"
            message = f"Your request to open {upgrade_request.farm_name} was declined."
            if upgrade_request.review_notes:
                message += f" {upgrade_request.review_notes}"

        return self.notify(
            recipient=upgrade_request.user,
            notification_type=NotificationType.FARM_UPGRADE,
            title=title,
            message=message,
        )

    # -------------------------------------------------------------------------
    # Reading and marking
    # -------------------------------------------------------------------------

    def _scoped(self, account):
        return NotificationPolicy.scope(account, Notification.objects.all())

    def list_for(self, account, unread_only=False):
        """
        Newest-first notifications for account.

        Degrades to an empty list if the store cannot be read.
        """
        queryset = self._scoped(account)
        if unread_only:
            queryset = queryset.filter(read=False)

        try:
            return list(queryset.select_related('related_order'))
        except DatabaseError:
            logger.exception(f"Failed to load notifications for user {account.pk}")
            return []

    def unread_count(self, account):
        return self._scoped(account).filter(read=False).count()

    def mark_read(self, actor, notification_id):
        try:
            notification = Notification.objects.get(pk=notification_id)
        except (Notification.DoesNotExist, DjangoValidationError):
            raise NotFound("Notification not found.")

        require(actor, 'edit', notification, "You can only mark your own notifications.")

        if not notification.read:
            notification.read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=['read', 'read_at'])

        return notification

    def mark_all_read(self, account):
        updated = self._scoped(account).filter(read=False).update(
            read=True,
            read_at=timezone.now(),
        )
        logger.info(f"Marked {updated} notifications read for user {account.pk}")
        return updated


notification_feed = NotificationFeed()

"""
Marketplace Authorization Policies

Ownership rules for farm profiles, products, orders and notifications.
The services call these through accounts.policies.authorize() and raise
Unauthorized when a check fails.
"""

from .base_policy import BasePolicy


class FarmProfilePolicy(BasePolicy):
    """Farm profiles are public to read; only the owner edits profile fields."""

    @classmethod
    def can_edit(cls, user, farm):
        return cls.owns_farm(user, farm)

    @classmethod
    def can_verify(cls, user, farm):
        return cls.is_admin(user)


class ProductPolicy(BasePolicy):
    """A farm exclusively owns its products."""

    @classmethod
    def can_edit(cls, user, product):
        return cls.owns_farm(user, product.farm)


class OrderPolicy(BasePolicy):
    """
    Buyers act on their own orders (cancel while pending, review once
    delivered); the selling farm's owner advances fulfilment.
    """

    @staticmethod
    def is_buyer(user, order):
        return user is not None and user.is_authenticated and order.buyer_id == user.pk

    @classmethod
    def is_seller(cls, user, order):
        return cls.owns_farm(user, order.farm)

    @classmethod
    def scope(cls, user, queryset):
        """Orders user placed as a buyer."""
        if not cls.is_authenticated(user):
            return queryset.none()
        return queryset.filter(buyer=user)

    @classmethod
    def can_view(cls, user, order):
        return cls.is_buyer(user, order) or cls.is_seller(user, order) or cls.is_admin(user)

    @classmethod
    def can_fulfil(cls, user, order):
        return cls.is_seller(user, order)

    @classmethod
    def can_cancel(cls, user, order):
        return cls.is_buyer(user, order) or cls.is_seller(user, order)

    @classmethod
    def can_review(cls, user, order):
        return cls.is_buyer(user, order)


class NotificationPolicy(BasePolicy):

    @classmethod
    def scope(cls, user, queryset):
        if not cls.is_authenticated(user):
            return queryset.none()
        return queryset.filter(recipient=user)

    @classmethod
    def can_edit(cls, user, notification):
        return cls.is_authenticated(user) and notification.recipient_id == user.pk


class UpgradeRequestPolicy(BasePolicy):

    @classmethod
    def scope(cls, user, queryset):
        if cls.is_admin(user):
            return queryset
        if not cls.is_authenticated(user):
            return queryset.none()
        return queryset.filter(user=user)

    @classmethod
    def can_review(cls, user, upgrade_request):
        return cls.is_admin(user)

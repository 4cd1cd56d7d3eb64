"""
Farm Directory Service

Handles:
- Looking up farm profiles by owner or id
- Owner edits to profile fields
- Upgrade requests (buyer account -> farm account) and their review
- Admin verification
- The farm dashboard summary
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone
import logging

from accounts.models import User
from accounts.policies import UpgradeRequestPolicy, require
from core.exceptions import (
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from farms.models import FarmProfile, FarmUpgradeRequest
from notifications.services import NotificationFeed

logger = logging.getLogger(__name__)


class FarmDirectory:
    """Service for farm profiles and farm upgrades"""

    def __init__(self):
        self.notifications = NotificationFeed()

    def get_by_owner(self, account):
        try:
            return FarmProfile.objects.select_related('owner').get(owner=account)
        except FarmProfile.DoesNotExist:
            raise NotFound("No farm profile found.")

    def get_by_id(self, farm_id):
        try:
            return FarmProfile.objects.select_related('owner').get(pk=farm_id)
        except (FarmProfile.DoesNotExist, DjangoValidationError):
            raise NotFound("Farm not found.")

    @transaction.atomic
    def update_profile(self, actor, farm, fields):
        """
        Apply owner edits to farm_name, farm_location, farm_description and
        farm_image_url. Anything else is rejected and nothing is written.
        """
        require(actor, 'edit', farm, "You can only edit your own farm profile.")

        derived = sorted(set(fields) & set(FarmProfile.DERIVED_FIELDS))
        if derived:
            raise ValidationFailed(
                f"{', '.join(derived)} are calculated from reviews and cannot be edited.",
                fields=derived
            )
        unknown = sorted(set(fields) - set(FarmProfile.EDITABLE_FIELDS))
        if unknown:
            raise ValidationFailed(
                f"These fields cannot be set: {', '.join(unknown)}.",
                fields=unknown
            )

        cleaned = {}
        for field, value in fields.items():
            if value is not None and not isinstance(value, str):
                raise ValidationFailed(f"{field} must be text.", field=field)
            value = (value or '').strip()
            if field in ('farm_name', 'farm_location') and not value:
                label = 'Farm name' if field == 'farm_name' else 'Farm location'
                raise ValidationFailed(f"{label} is required.", field=field)
            if field == 'farm_image_url' and value:
                try:
                    URLValidator()(value)
                except DjangoValidationError:
                    raise ValidationFailed("Farm image must be a valid URL.", field=field)
            cleaned[field] = value

        for field, value in cleaned.items():
            setattr(farm, field, value)
        farm.save(update_fields=list(cleaned) + ['updated_at'])

        logger.info(f"Farm profile {farm.id} updated: {', '.join(cleaned) or 'no changes'}")
        return farm

    # -------------------------------------------------------------------------
    # Upgrade requests
    # -------------------------------------------------------------------------

    def upgrade_requests_for(self, actor):
        queryset = FarmUpgradeRequest.objects.select_related('user', 'reviewed_by')
        return UpgradeRequestPolicy.scope(actor, queryset)

    def get_upgrade_request(self, request_id):
        try:
            return FarmUpgradeRequest.objects.select_related('user').get(pk=request_id)
        except (FarmUpgradeRequest.DoesNotExist, DjangoValidationError):
            raise NotFound("Upgrade request not found.")

    def request_upgrade(self, account, farm_name, farm_location, description=''):
        if account.farm is not None:
            raise ValidationFailed("This account already has a farm profile.")

        farm_name = (farm_name or '').strip()
        farm_location = (farm_location or '').strip()
        if not farm_name:
            raise ValidationFailed("Farm name is required.", field='farm_name')
        if not farm_location:
            raise ValidationFailed("Farm location is required.", field='farm_location')

        try:
            with transaction.atomic():
                upgrade_request = FarmUpgradeRequest.objects.create(
                    user=account,
                    farm_name=farm_name,
                    farm_location=farm_location,
                    description=(description or '').strip(),
                )
        except IntegrityError:
            raise ValidationFailed("You already have a pending upgrade request.")

        logger.info(f"Farm upgrade requested by user {account.pk}: {farm_name}")
        return upgrade_request

    def _decide(self, actor, upgrade_request, new_status, notes):
        require(actor, 'review', upgrade_request, "Only administrators can review upgrade requests.")

        updated = FarmUpgradeRequest.objects.filter(
            pk=upgrade_request.pk,
            status=FarmUpgradeRequest.Status.PENDING
        ).update(
            status=new_status,
            reviewed_by=actor,
            reviewed_at=timezone.now(),
            review_notes=notes or '',
            updated_at=timezone.now(),
        )
        if not updated:
            raise InvalidTransition("This upgrade request has already been reviewed.")

        upgrade_request.refresh_from_db()
        return upgrade_request

    @transaction.atomic
    def approve_upgrade(self, actor, upgrade_request, notes=''):
        """Create the farm profile and switch the account to the farm role."""
        upgrade_request = self._decide(actor, upgrade_request, FarmUpgradeRequest.Status.APPROVED, notes)
        if FarmProfile.objects.filter(owner_id=upgrade_request.user_id).exists():
            raise ValidationFailed("This account already has a farm profile.")

        account = upgrade_request.user
        farm = FarmProfile.objects.create(
            owner=account,
            farm_name=upgrade_request.farm_name,
            farm_location=upgrade_request.farm_location,
            farm_description=upgrade_request.description,
        )
        User.objects.filter(pk=account.pk).update(role=User.UserRole.FARM)
        account.role = User.UserRole.FARM

        self.notifications.upgrade_decided(upgrade_request)

        logger.info(f"Farm upgrade {upgrade_request.id} approved by {actor.pk}; farm {farm.id} created")
        return farm

    @transaction.atomic
    def reject_upgrade(self, actor, upgrade_request, notes=''):
        upgrade_request = self._decide(actor, upgrade_request, FarmUpgradeRequest.Status.REJECTED, notes)
        self.notifications.upgrade_decided(upgrade_request)

        logger.info(f"Farm upgrade {upgrade_request.id} rejected by {actor.pk}")
        return upgrade_request

    def set_verified(self, actor, farm, verified=True):
        require(actor, 'verify', farm, "Only administrators can verify farms.")

        FarmProfile.objects.filter(pk=farm.pk).update(verified=verified, updated_at=timezone.now())
        farm.verified = verified

        logger.info(f"Farm {farm.id} verified={verified} by {actor.pk}")
        return farm

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    def dashboard(self, actor, farm):
        """Summary counts for the farm's own dashboard."""
        require(actor, 'edit', farm, "You can only view your own dashboard.")

        from catalog.models import Product
        from orders.models import OrderStatus

        products = farm.products.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(status=Product.ListingStatus.ACTIVE)),
        )
        orders = farm.orders.aggregate(
            total=Count('id'),
            pending=Count('id', filter=Q(status=OrderStatus.PENDING)),
        )

        return {
            'total_products': products['total'],
            'active_products': products['active'],
            'total_orders': orders['total'],
            'pending_orders': orders['pending'],
            'rating': farm.display_rating,
            'total_reviews': farm.total_reviews,
            'total_sales': farm.total_sales,
        }


farm_directory = FarmDirectory()

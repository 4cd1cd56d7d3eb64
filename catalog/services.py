"""
Catalog Store Service

Public product reads, the stock reservation primitives used by the order
lifecycle, and farm-side listing management.

Stock changes are single conditional UPDATE statements so that two
concurrent reservations can never both succeed against the same units.
"""

from datetime import date
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone
from django.utils.dateparse import parse_date
import logging

from accounts.policies import require
from catalog.models import Cultivar, Product
from core.exceptions import (
    InsufficientStock,
    NotFound,
    Unauthorized,
    ValidationFailed,
)

logger = logging.getLogger(__name__)


def _as_date(value, field):
    if value is None or isinstance(value, date):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValidationFailed(f"{field} must be a date (YYYY-MM-DD).", field=field)
    return parsed


def _positive_int(value, field, allow_zero=False):
    if isinstance(value, bool):
        raise ValidationFailed(f"{field} must be a whole number.", field=field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a whole number.", field=field)
    if number != value and str(number) != str(value).strip():
        raise ValidationFailed(f"{field} must be a whole number.", field=field)
    if number < 0 or (number == 0 and not allow_zero):
        bound = 'zero or more' if allow_zero else 'greater than zero'
        raise ValidationFailed(f"{field} must be {bound}.", field=field)
    return number


class CatalogStore:
    """Service for product listings and stock"""

    # -------------------------------------------------------------------------
    # Public catalog
    # -------------------------------------------------------------------------

    def list_active(self, search=None, product_type=None):
        """
        Active products with their farm, soonest harvest first.

        search matches product name or farm name; product_type 'all' or
        empty means no type filter.
        """
        queryset = Product.objects.active().with_farm()

        if product_type and product_type != 'all':
            if product_type not in Product.ProductType.values:
                raise ValidationFailed(
                    f"Unknown product type '{product_type}'.",
                    field='product_type'
                )
            queryset = queryset.filter(product_type=product_type)

        if search:
            search = search.strip()
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(farm__farm_name__icontains=search)
            )

        return queryset.order_by('harvest_date', 'created_at')

    def get_by_id(self, product_id):
        try:
            return Product.objects.active().with_farm().get(pk=product_id)
        except (Product.DoesNotExist, DjangoValidationError):
            raise NotFound("Product not found.")

    # -------------------------------------------------------------------------
    # Stock primitives
    # -------------------------------------------------------------------------

    def reserve(self, product_id, quantity):
        """
        Take quantity units from an active product.

        Returns the product as stored after the decrement. Raises NotFound
        for a missing or retired product and InsufficientStock when fewer
        units remain; stock is untouched in both cases.
        """
        quantity = _positive_int(quantity, 'quantity')

        try:
            updated = Product.objects.filter(
                pk=product_id,
                status=Product.ListingStatus.ACTIVE,
                available_quantity__gte=quantity,
            ).update(
                available_quantity=F('available_quantity') - quantity,
                updated_at=timezone.now(),
            )
        except DjangoValidationError:
            raise NotFound("Product not found.")

        if not updated:
            product = Product.objects.active().filter(pk=product_id).first()
            if product is None:
                raise NotFound("Product not found.")
            logger.info(
                f"Reservation of {quantity} rejected for product {product_id}: "
                f"{product.available_quantity} available"
            )
            raise InsufficientStock(
                f"Only {product.available_quantity} {product.unit} available.",
                available_quantity=product.available_quantity,
            )

        logger.info(f"Reserved {quantity} units of product {product_id}")
        return Product.objects.with_farm().get(pk=product_id)

    def release(self, product_id, quantity):
        """Return quantity units to a product, retired or not."""
        quantity = _positive_int(quantity, 'quantity')

        updated = Product.objects.filter(pk=product_id).update(
            available_quantity=F('available_quantity') + quantity,
            updated_at=timezone.now(),
        )
        if not updated:
            raise NotFound("Product not found.")

        logger.info(f"Released {quantity} units back to product {product_id}")

    # -------------------------------------------------------------------------
    # Farm-side listing management
    # -------------------------------------------------------------------------

    def products_for_farm(self, farm):
        return Product.objects.filter(farm=farm).select_related('cultivar').order_by('-created_at')

    def get_for_farm(self, actor, product_id):
        """A product of any status, for its owning farm only."""
        try:
            product = Product.objects.with_farm().get(pk=product_id)
        except (Product.DoesNotExist, DjangoValidationError):
            raise NotFound("Product not found.")
        require(actor, 'edit', product, "You can only manage your own products.")
        return product

    def _clean_fields(self, fields, instance=None):
        """
        Validate listing fields before anything is written.

        With an instance, fields is a partial update merged over it.
        """
        unknown = sorted(set(fields) - set(Product.EDITABLE_FIELDS))
        if unknown:
            raise ValidationFailed(
                f"These fields cannot be set: {', '.join(unknown)}.",
                fields=unknown
            )

        cleaned = dict(fields)

        if 'name' in cleaned or instance is None:
            name = (cleaned.get('name') or '').strip()
            if not name:
                raise ValidationFailed("Product name is required.", field='name')
            cleaned['name'] = name

        if 'product_type' in cleaned or instance is None:
            if cleaned.get('product_type') not in Product.ProductType.values:
                raise ValidationFailed(
                    "Product type must be 'fruit' or 'shoot'.",
                    field='product_type'
                )

        if 'price_per_unit' in cleaned or instance is None:
            try:
                price = Decimal(str(cleaned.get('price_per_unit')))
            except (InvalidOperation, ValueError):
                raise ValidationFailed("Price must be a number.", field='price_per_unit')
            if not price.is_finite() or price <= 0:
                raise ValidationFailed("Price must be greater than zero.", field='price_per_unit')
            cleaned['price_per_unit'] = price.quantize(Decimal('0.01'))

        if 'available_quantity' in cleaned or instance is None:
            cleaned['available_quantity'] = _positive_int(
                cleaned.get('available_quantity', 0), 'available_quantity', allow_zero=True
            )

        if 'unit' in cleaned:
            cleaned['unit'] = (cleaned['unit'] or '').strip() or 'kg'

        if 'cultivar' in cleaned and cleaned['cultivar'] is not None:
            if not isinstance(cleaned['cultivar'], Cultivar):
                raise ValidationFailed("Unknown cultivar.", field='cultivar')

        if 'harvest_date' in cleaned:
            cleaned['harvest_date'] = _as_date(cleaned['harvest_date'], 'harvest_date')
        if 'expiry_date' in cleaned:
            cleaned['expiry_date'] = _as_date(cleaned['expiry_date'], 'expiry_date')

        harvest_date = cleaned.get('harvest_date', getattr(instance, 'harvest_date', None))
        expiry_date = cleaned.get('expiry_date', getattr(instance, 'expiry_date', None))
        if harvest_date is None:
            raise ValidationFailed("Harvest date is required.", field='harvest_date')
        if expiry_date is not None and expiry_date < harvest_date:
            raise ValidationFailed(
                "Expiry date cannot be before the harvest date.",
                field='expiry_date'
            )

        return cleaned

    @transaction.atomic
    def create_product(self, actor, **fields):
        farm = actor.farm if actor is not None and actor.is_authenticated else None
        if farm is None:
            raise Unauthorized("Only farm accounts can list products.")

        cleaned = self._clean_fields(fields)
        product = Product.objects.create(farm=farm, **cleaned)

        logger.info(f"Product {product.id} '{product.name}' listed by farm {farm.id}")
        return product

    @transaction.atomic
    def update_product(self, actor, product, fields):
        require(actor, 'edit', product, "You can only manage your own products.")

        cleaned = self._clean_fields(fields, instance=product)
        for field, value in cleaned.items():
            setattr(product, field, value)
        product.save(update_fields=list(cleaned) + ['updated_at'])

        logger.info(f"Product {product.id} updated: {', '.join(cleaned)}")
        return product

    @transaction.atomic
    def retire(self, actor, product):
        """Hide a listing from the catalog. Existing orders are unaffected."""
        require(actor, 'edit', product, "You can only manage your own products.")

        now = timezone.now()
        Product.objects.filter(
            pk=product.pk,
            status=Product.ListingStatus.ACTIVE
        ).update(status=Product.ListingStatus.RETIRED, retired_at=now, updated_at=now)
        product.refresh_from_db()

        logger.info(f"Product {product.id} retired")
        return product

    @transaction.atomic
    def reactivate(self, actor, product):
        require(actor, 'edit', product, "You can only manage your own products.")

        Product.objects.filter(
            pk=product.pk,
            status=Product.ListingStatus.RETIRED
        ).update(status=Product.ListingStatus.ACTIVE, retired_at=None, updated_at=timezone.now())
        product.refresh_from_db()

        logger.info(f"Product {product.id} reactivated")
        return product

    # -------------------------------------------------------------------------
    # Cultivars
    # -------------------------------------------------------------------------

    def list_cultivars(self):
        return Cultivar.objects.all()

    def get_cultivar(self, slug):
        try:
            return Cultivar.objects.get(slug=slug)
        except Cultivar.DoesNotExist:
            raise NotFound("Cultivar not found.")


catalog_store = CatalogStore()

"""
Shared fixtures for the marketplace test suite.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

User = get_user_model()


# =============================================================================
# ACCOUNTS
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def buyer(db):
    """Create a buyer account."""
    return User.objects.create_user(
        username='buyer_somchai',
        email='somchai@example.com',
        password='testpass123',
        full_name='Somchai Jaidee',
        phone='+66812345601',
        address='12 Sukhumvit Rd, Bangkok',
    )


@pytest.fixture
def other_buyer(db):
    return User.objects.create_user(
        username='buyer_malee',
        email='malee@example.com',
        password='testpass123',
        full_name='Malee Srisuk',
    )


@pytest.fixture
def farm_user(db):
    """Create a farm account."""
    return User.objects.create_user(
        username='farm_suda',
        email='suda@example.com',
        password='testpass123',
        full_name='Suda Kaewmanee',
        role='farm',
    )


@pytest.fixture
def other_farm_user(db):
    return User.objects.create_user(
        username='farm_anan',
        email='anan@example.com',
        password='testpass123',
        full_name='Anan Thongdee',
        role='farm',
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='marketplace_admin',
        email='admin@example.com',
        password='testpass123',
        role='admin',
        is_staff=True,
    )


# =============================================================================
# FARMS, CATALOG
# =============================================================================

@pytest.fixture
def farm(db, farm_user):
    from farms.models import FarmProfile

    return FarmProfile.objects.create(
        owner=farm_user,
        farm_name='Suda Banana Garden',
        farm_location='Chumphon',
        farm_description='Family-run Hom Thong plantation',
    )


@pytest.fixture
def other_farm(db, other_farm_user):
    from farms.models import FarmProfile

    return FarmProfile.objects.create(
        owner=other_farm_user,
        farm_name='Anan Highland Farm',
        farm_location='Chiang Rai',
    )


@pytest.fixture
def cultivar(db):
    from catalog.models import Cultivar

    return Cultivar.objects.create(
        name='Hom Thong',
        slug='hom-thong',
        thai_name='กล้วยหอมทอง',
        description='Sweet, fragrant dessert banana.',
    )


@pytest.fixture
def make_product(db, farm):
    """Factory for products; defaults to an active fruit listing of farm."""
    from catalog.models import Product

    def _make(**overrides):
        fields = {
            'farm': farm,
            'name': 'Hom Thong bananas',
            'product_type': Product.ProductType.FRUIT,
            'price_per_unit': Decimal('50.00'),
            'available_quantity': 10,
            'unit': 'kg',
            'harvest_date': date.today() - timedelta(days=2),
        }
        fields.update(overrides)
        return Product.objects.create(**fields)

    return _make


@pytest.fixture
def product(make_product):
    return make_product()


# =============================================================================
# ORDERS
# =============================================================================

@pytest.fixture
def lifecycle():
    from orders.services import OrderLifecycle

    return OrderLifecycle()


@pytest.fixture
def place_order(lifecycle, buyer, product):
    """Place an order as buyer for product (quantity 2 unless given)."""

    def _place(quantity=2, order_buyer=None, order_product=None):
        return lifecycle.place_order(
            order_buyer or buyer,
            (order_product or product).pk,
            quantity,
            delivery_address='12 Sukhumvit Rd, Bangkok',
        )

    return _place


@pytest.fixture
def advance_to(lifecycle, farm_user):
    """Drive an order forward through the farm-side transitions."""
    from orders.models import OrderStatus

    steps = [
        (OrderStatus.CONFIRMED, lambda order: lifecycle.confirm(farm_user, order)),
        (OrderStatus.SHIPPED, lambda order: lifecycle.ship(farm_user, order, tracking_number='TRK1')),
        (OrderStatus.DELIVERED, lambda order: lifecycle.deliver(farm_user, order)),
    ]

    def _advance(order, target):
        for status, step in steps:
            step(order)
            if status == target:
                return order
        raise ValueError(f"Cannot drive an order to {target}")

    return _advance

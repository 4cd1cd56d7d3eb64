"""
Farm Directory Tests

Tests cover:
1. Profile lookups and owner-only edits
2. Derived fields cannot be written through profile edits
3. Upgrade requests and their review
4. Verification and the farm dashboard

Run with: pytest tests/integration/test_farm_directory.py -v
"""

import pytest
from decimal import Decimal

from accounts.models import User
from catalog.models import Product
from core.exceptions import InvalidTransition, NotFound, Unauthorized, ValidationFailed
from farms.models import FarmProfile, FarmUpgradeRequest
from farms.services import FarmDirectory
from notifications.models import Notification


@pytest.fixture
def directory():
    return FarmDirectory()


# =============================================================================
# PROFILE
# =============================================================================

@pytest.mark.django_db
class TestFarmProfile:

    def test_get_by_owner(self, directory, farm_user, farm):
        assert directory.get_by_owner(farm_user) == farm

    def test_buyer_has_no_farm(self, directory, buyer):
        with pytest.raises(NotFound):
            directory.get_by_owner(buyer)

    def test_get_by_id_unknown(self, directory, db):
        with pytest.raises(NotFound):
            directory.get_by_id('00000000-0000-0000-0000-000000000000')

    def test_owner_updates_editable_fields(self, directory, farm_user, farm):
        directory.update_profile(farm_user, farm, {
            'farm_name': 'Suda Organic Bananas',
            'farm_description': 'Now certified organic',
        })

        farm.refresh_from_db()
        assert farm.farm_name == 'Suda Organic Bananas'
        assert farm.farm_description == 'Now certified organic'
        assert farm.farm_location == 'Chumphon'

    @pytest.mark.parametrize('field', ['rating', 'total_reviews', 'total_sales'])
    def test_derived_fields_rejected(self, directory, farm_user, farm, field):
        with pytest.raises(ValidationFailed):
            directory.update_profile(farm_user, farm, {'farm_name': 'Renamed', field: 5})

        farm.refresh_from_db()
        assert farm.farm_name == 'Suda Banana Garden'
        assert farm.rating == 0.0
        assert farm.total_reviews == 0
        assert farm.total_sales == Decimal('0.00')

    def test_verified_not_owner_editable(self, directory, farm_user, farm):
        with pytest.raises(ValidationFailed):
            directory.update_profile(farm_user, farm, {'verified': True})

    def test_blank_name_rejected(self, directory, farm_user, farm):
        with pytest.raises(ValidationFailed):
            directory.update_profile(farm_user, farm, {'farm_name': '  '})

    def test_other_account_cannot_edit(self, directory, other_farm_user, farm):
        with pytest.raises(Unauthorized):
            directory.update_profile(other_farm_user, farm, {'farm_name': 'Taken'})

    def test_image_url_must_be_a_url(self, directory, farm_user, farm):
        with pytest.raises(ValidationFailed):
            directory.update_profile(farm_user, farm, {'farm_image_url': 'not a url'})

        farm.refresh_from_db()
        assert farm.farm_image_url == ''

    def test_image_url_saved_and_cleared(self, directory, farm_user, farm):
        directory.update_profile(farm_user, farm, {'farm_image_url': 'https://img.example.com/farm.jpg'})
        farm.refresh_from_db()
        assert farm.farm_image_url == 'https://img.example.com/farm.jpg'

        directory.update_profile(farm_user, farm, {'farm_image_url': ''})
        farm.refresh_from_db()
        assert farm.farm_image_url == ''

    def test_non_text_values_rejected(self, directory, farm_user, farm):
        with pytest.raises(ValidationFailed):
            directory.update_profile(farm_user, farm, {'farm_name': ['New Name']})

        farm.refresh_from_db()
        assert farm.farm_name == 'Suda Banana Garden'


# =============================================================================
# UPGRADE REQUESTS
# =============================================================================

@pytest.mark.django_db
class TestUpgradeRequests:

    def test_request_and_approve(self, directory, buyer, admin_user):
        upgrade_request = directory.request_upgrade(buyer, 'Somchai Farm', 'Rayong', 'Namwa grower')

        farm = directory.approve_upgrade(admin_user, upgrade_request, notes='Welcome')

        buyer.refresh_from_db()
        upgrade_request.refresh_from_db()
        assert buyer.role == User.UserRole.FARM
        assert farm.owner == buyer
        assert farm.farm_name == 'Somchai Farm'
        assert farm.farm_description == 'Namwa grower'
        assert upgrade_request.status == FarmUpgradeRequest.Status.APPROVED
        assert upgrade_request.reviewed_by == admin_user
        assert Notification.objects.filter(
            recipient=buyer,
            notification_type=Notification.NotificationType.FARM_UPGRADE
        ).count() == 1

    def test_reject(self, directory, buyer, admin_user):
        upgrade_request = directory.request_upgrade(buyer, 'Somchai Farm', 'Rayong')

        directory.reject_upgrade(admin_user, upgrade_request, notes='Incomplete details')

        buyer.refresh_from_db()
        assert buyer.role == User.UserRole.USER
        assert upgrade_request.status == FarmUpgradeRequest.Status.REJECTED
        assert not FarmProfile.objects.filter(owner=buyer).exists()

    def test_one_pending_request_per_account(self, directory, buyer):
        directory.request_upgrade(buyer, 'Somchai Farm', 'Rayong')

        with pytest.raises(ValidationFailed):
            directory.request_upgrade(buyer, 'Second Farm', 'Rayong')

    def test_reviewed_request_cannot_be_decided_again(self, directory, buyer, admin_user):
        upgrade_request = directory.request_upgrade(buyer, 'Somchai Farm', 'Rayong')
        directory.reject_upgrade(admin_user, upgrade_request)

        with pytest.raises(InvalidTransition):
            directory.approve_upgrade(admin_user, upgrade_request)

        assert not FarmProfile.objects.filter(owner=buyer).exists()

    def test_non_admin_cannot_review(self, directory, buyer, other_buyer):
        upgrade_request = directory.request_upgrade(buyer, 'Somchai Farm', 'Rayong')

        with pytest.raises(Unauthorized):
            directory.approve_upgrade(other_buyer, upgrade_request)

    def test_farm_account_cannot_request_again(self, directory, farm_user, farm):
        with pytest.raises(ValidationFailed):
            directory.request_upgrade(farm_user, 'Another', 'Trat')

    def test_name_and_location_required(self, directory, buyer):
        with pytest.raises(ValidationFailed):
            directory.request_upgrade(buyer, '', 'Rayong')
        with pytest.raises(ValidationFailed):
            directory.request_upgrade(buyer, 'Somchai Farm', ' ')

    def test_requests_visible_to_requester_and_admin(self, directory, buyer, other_buyer, admin_user):
        mine = directory.request_upgrade(buyer, 'Somchai Farm', 'Rayong')
        theirs = directory.request_upgrade(other_buyer, 'Malee Farm', 'Trat')

        assert list(directory.upgrade_requests_for(buyer)) == [mine]
        assert set(directory.upgrade_requests_for(admin_user)) == {mine, theirs}


# =============================================================================
# VERIFICATION AND DASHBOARD
# =============================================================================

@pytest.mark.django_db
class TestVerificationAndDashboard:

    def test_admin_verifies_farm(self, directory, admin_user, farm):
        directory.set_verified(admin_user, farm)

        farm.refresh_from_db()
        assert farm.verified

    def test_owner_cannot_verify_self(self, directory, farm_user, farm):
        with pytest.raises(Unauthorized):
            directory.set_verified(farm_user, farm)

    def test_dashboard_counts(self, directory, farm_user, farm, make_product, place_order, lifecycle):
        make_product(name='Retired', status=Product.ListingStatus.RETIRED)
        first = place_order()
        place_order()
        lifecycle.confirm(farm_user, first)

        summary = directory.dashboard(farm_user, farm)

        assert summary['total_products'] == 2
        assert summary['active_products'] == 1
        assert summary['total_orders'] == 2
        assert summary['pending_orders'] == 1
        assert summary['rating'] == 0.0

    def test_dashboard_owner_only(self, directory, other_farm_user, farm):
        with pytest.raises(Unauthorized):
            directory.dashboard(other_farm_user, farm)

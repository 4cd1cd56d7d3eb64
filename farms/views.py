"""
Farm Directory API Views
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsFarmAccount, IsMarketplaceAdmin
from core.exceptions import ValidationFailed
from farms.serializers import (
    FarmDashboardSerializer,
    FarmProfileSerializer,
    FarmProfileUpdateSerializer,
    FarmUpgradeRequestSerializer,
    UpgradeDecisionSerializer,
)
from farms.services import farm_directory


def _profile_input(request):
    unknown = sorted(set(request.data) - set(FarmProfileUpdateSerializer().fields))
    if unknown:
        raise ValidationFailed(
            f"These fields cannot be set: {', '.join(unknown)}.",
            fields=unknown
        )
    serializer = FarmProfileUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class MyFarmView(APIView):
    """
    GET: the authenticated account's farm profile
    PATCH: edit farm_name, farm_location, farm_description, farm_image_url
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        farm = farm_directory.get_by_owner(request.user)
        return Response(FarmProfileSerializer(farm).data)

    def patch(self, request):
        farm = farm_directory.get_by_owner(request.user)
        farm = farm_directory.update_profile(request.user, farm, dict(_profile_input(request)))
        return Response(FarmProfileSerializer(farm).data)


class FarmDashboardView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsFarmAccount]

    def get(self, request):
        farm = farm_directory.get_by_owner(request.user)
        summary = farm_directory.dashboard(request.user, farm)
        return Response(FarmDashboardSerializer(summary).data)


class FarmDetailView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, pk):
        farm = farm_directory.get_by_id(pk)
        return Response(FarmProfileSerializer(farm).data)


class FarmVerifyView(APIView):
    """Admin: set or clear a farm's verified badge. Body: {"verified": bool}"""
    permission_classes = [permissions.IsAuthenticated, IsMarketplaceAdmin]

    def post(self, request, pk):
        farm = farm_directory.get_by_id(pk)
        verified = request.data.get('verified', True)
        if isinstance(verified, str):
            verified = verified.lower() in ('true', '1', 'yes')
        farm = farm_directory.set_verified(request.user, farm, bool(verified))
        return Response(FarmProfileSerializer(farm).data)


# =============================================================================
# UPGRADE REQUESTS
# =============================================================================

class UpgradeRequestListCreateView(generics.ListCreateAPIView):
    """
    GET: the caller's own requests (all requests for administrators)
    POST: ask to become a farm account
    """
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = FarmUpgradeRequestSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['status']

    def get_queryset(self):
        return farm_directory.upgrade_requests_for(self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upgrade_request = farm_directory.request_upgrade(
            request.user,
            farm_name=serializer.validated_data['farm_name'],
            farm_location=serializer.validated_data['farm_location'],
            description=serializer.validated_data.get('description', ''),
        )
        return Response(
            self.get_serializer(upgrade_request).data,
            status=status.HTTP_201_CREATED
        )


class UpgradeRequestReviewView(APIView):
    """Admin: approve or reject a pending upgrade request."""
    permission_classes = [permissions.IsAuthenticated, IsMarketplaceAdmin]

    def post(self, request, pk):
        serializer = UpgradeDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        upgrade_request = farm_directory.get_upgrade_request(pk)
        notes = serializer.validated_data['notes']

        if serializer.validated_data['decision'] == 'approve':
            farm = farm_directory.approve_upgrade(request.user, upgrade_request, notes)
            return Response({
                'message': 'Upgrade approved',
                'farm': FarmProfileSerializer(farm).data,
            }, status=status.HTTP_201_CREATED)

        upgrade_request = farm_directory.reject_upgrade(request.user, upgrade_request, notes)
        return Response({
            'message': 'Upgrade rejected',
            'request': FarmUpgradeRequestSerializer(upgrade_request).data,
        })

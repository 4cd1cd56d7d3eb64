from rest_framework.permissions import BasePermission

from accounts.policies import BasePolicy


class IsFarmAccount(BasePermission):
    """Farm accounts with a FarmProfile."""
    message = 'Only farm accounts can access this resource.'

    def has_permission(self, request, view):
        return BasePolicy.is_farm(request.user)


class IsMarketplaceAdmin(BasePermission):
    message = 'Only marketplace administrators can access this resource.'

    def has_permission(self, request, view):
        return BasePolicy.is_admin(request.user)

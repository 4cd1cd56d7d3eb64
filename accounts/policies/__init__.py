"""
Authorization Policies (CanCanCan-style)

This module provides policy classes for resource-level authorization.
Each policy defines what actions users can perform on specific resources.
"""

from .base_policy import BasePolicy
from .marketplace_policy import (
    FarmProfilePolicy,
    ProductPolicy,
    OrderPolicy,
    NotificationPolicy,
    UpgradeRequestPolicy,
)

# Policy registry maps model names to their policy classes
POLICY_REGISTRY = {
    'FarmProfile': FarmProfilePolicy,
    'Product': ProductPolicy,
    'Order': OrderPolicy,
    'Notification': NotificationPolicy,
    'FarmUpgradeRequest': UpgradeRequestPolicy,
}


def get_policy_for_resource(resource):
    """
    Get the appropriate policy class for a resource.

    Args:
        resource: Model instance or class

    Returns:
        Policy class or None if no policy registered
    """
    if isinstance(resource, type):
        resource_type = resource.__name__
    else:
        resource_type = resource.__class__.__name__

    return POLICY_REGISTRY.get(resource_type)


def authorize(user, action, resource):
    """
    Check if user can perform action on resource.

    Args:
        user: User instance
        action: Action name (e.g., 'view', 'edit', 'cancel')
        resource: Resource instance

    Returns:
        Boolean indicating if action is allowed
    """
    policy_class = get_policy_for_resource(resource)

    if not policy_class:
        # No policy defined, deny by default
        return False

    method = getattr(policy_class, f'can_{action}', None)

    if not method:
        # Method not defined, deny by default
        return False

    return method(user, resource)


def require(user, action, resource, message=None):
    """Like authorize(), but raises Unauthorized when the check fails."""
    from core.exceptions import Unauthorized

    if not authorize(user, action, resource):
        raise Unauthorized(message)


__all__ = [
    'BasePolicy',
    'FarmProfilePolicy',
    'ProductPolicy',
    'OrderPolicy',
    'NotificationPolicy',
    'UpgradeRequestPolicy',
    'get_policy_for_resource',
    'authorize',
    'require',
]

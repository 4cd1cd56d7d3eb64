"""
Base Policy Class

Provides common authorization methods for all policy classes.
"""


class BasePolicy:
    """
    Base class for all authorization policies.
    Provides helper methods for common permission checks.
    """

    @staticmethod
    def is_authenticated(user):
        return user is not None and user.is_authenticated

    @staticmethod
    def is_admin(user):
        """Check if user is a marketplace administrator."""
        return BasePolicy.is_authenticated(user) and (
            user.is_superuser or user.has_role('admin')
        )

    @staticmethod
    def is_farm(user):
        """Check if user is a farm account with a farm profile."""
        return (
            BasePolicy.is_authenticated(user) and
            user.has_role('farm') and
            user.farm is not None
        )

    @staticmethod
    def owns_farm(user, farm):
        """Check if farm profile belongs to user."""
        return BasePolicy.is_authenticated(user) and farm.owner_id == user.pk

    @classmethod
    def scope(cls, user, queryset):
        """
        Filter queryset based on user's access level.
        Override in subclasses for model-specific scoping.
        """
        raise NotImplementedError("Subclasses must implement scope() method")

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ObjectDoesNotExist
from django.db import models
from phonenumber_field.modelfields import PhoneNumberField
import uuid


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Every account can buy. Accounts upgraded to farm status own exactly one
    FarmProfile; admins review upgrade requests and verify farms.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        USER = 'user', 'Buyer'
        FARM = 'farm', 'Farm'
        ADMIN = 'admin', 'Administrator'

    email = models.EmailField(unique=True)

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.USER,
        db_index=True,
        help_text="User's primary role in the marketplace"
    )

    # Personal profile
    full_name = models.CharField(max_length=200, blank=True)
    phone = PhoneNumberField(
        region='TH',
        blank=True,
        null=True,
        help_text="Phone number (Thai format: +66XXXXXXXXX)"
    )
    address = models.TextField(
        blank=True,
        help_text="Default delivery address"
    )
    avatar_url = models.URLField(blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['role', 'is_active']),
        ]

    def __str__(self):
        return f"{self.get_full_name()} ({self.get_role_display()})"

    def get_full_name(self):
        """Return the profile name, falling back to first/last name or username."""
        if self.full_name:
            return self.full_name
        full_name = super().get_full_name()
        return full_name if full_name else self.username

    def has_role(self, role):
        return self.role == role

    @property
    def is_marketplace_admin(self):
        return self.is_superuser or self.role == self.UserRole.ADMIN

    @property
    def farm(self):
        """The account's FarmProfile, or None for buyer-only accounts."""
        try:
            return self.farm_profile
        except ObjectDoesNotExist:
            return None

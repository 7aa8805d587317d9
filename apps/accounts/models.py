# accounts/models.py

from django.contrib.auth.models import User
from django.db import models
from django.core.validators import RegexValidator
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATORS
# =============================================================================

phone_validator = RegexValidator(
    regex=r'^\+?1?\d{9,15}$',
    message="Phone number must be entered in the format: '+999999999'. Up to 15 digits allowed."
)


# =============================================================================
# USER PROFILE
# =============================================================================

class UserProfile(BaseModel):
    """Role and contact details for a system user (administrator or parent)"""

    ADMIN = 'ADMIN'
    PARENT = 'PARENT'

    USER_ROLES = [
        (ADMIN, 'Administrator'),
        (PARENT, 'Parent'),
    ]

    # -------------------------------------------------------------------------
    # CORE RELATIONSHIPS
    # -------------------------------------------------------------------------

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='profile'
    )
    role = models.CharField(
        "Role",
        max_length=20,
        choices=USER_ROLES,
        default=PARENT,
        db_index=True
    )

    # -------------------------------------------------------------------------
    # PERSONAL INFORMATION
    # -------------------------------------------------------------------------

    full_name = models.CharField("Full Name", max_length=200)
    phone_number = models.CharField(
        "Phone Number",
        max_length=16,
        validators=[phone_validator],
        blank=True,
        null=True
    )

    class Meta:
        verbose_name = "User Profile"
        verbose_name_plural = "User Profiles"
        ordering = ['full_name']

    def __str__(self):
        return f"{self.full_name} - {self.get_role_display()}"

    # -------------------------------------------------------------------------
    # PERMISSION HELPER METHODS
    # -------------------------------------------------------------------------

    def is_admin_user(self):
        """Check if user has admin privileges"""
        return self.role == self.ADMIN or self.user.is_superuser

    def is_parent(self):
        return self.role == self.PARENT

    @property
    def email(self):
        return self.user.email

# accounts/services.py

"""
User account operations.

Authentication itself is Django's; this module only creates users with a
role-bearing profile and answers role questions for the other apps.
"""

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
import logging

from accounts.models import UserProfile
from core.exceptions import UserNotFound
from core.utils import get_or_not_found

logger = logging.getLogger(__name__)


class UserService:
    """Create and look up administrator and parent accounts."""

    @staticmethod
    @transaction.atomic
    def create_user(email, password, full_name, role, is_active=True, phone_number=None):
        """
        Create a user with a hashed password and a profile carrying its role.

        The email doubles as the username and must be unique (case-insensitive).

        Args:
            email (str): Login email
            password (str): Raw password, hashed by Django
            full_name (str): Display name
            role (str): UserProfile.ADMIN or UserProfile.PARENT
            is_active (bool): Whether the account may log in
            phone_number (str, optional): Contact number

        Returns:
            User instance (with ``profile``)

        Raises:
            ValidationError: invalid email, duplicate email, unknown role,
                empty password or name

        Example:
            parent = UserService.create_user(
                'parent@example.com', 's3cret!', 'Jane Parent', UserProfile.PARENT
            )
        """
        email = (email or '').strip().lower()
        full_name = (full_name or '').strip()

        validate_email(email)
        if not password:
            raise ValidationError({'password': "Password is required."})
        if not full_name:
            raise ValidationError({'full_name': "Full name is required."})
        if role not in dict(UserProfile.USER_ROLES):
            raise ValidationError({'role': f"Unknown role '{role}'."})
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username__iexact=email).exists():
            raise ValidationError({'email': f"A user with email {email} already exists."})

        first_name, _, last_name = full_name.partition(' ')
        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            first_name=first_name[:150],
            last_name=last_name[:150],
            is_active=is_active,
            is_staff=(role == UserProfile.ADMIN),
        )

        profile = UserProfile(user=user, role=role, full_name=full_name, phone_number=phone_number or None)
        profile.full_clean(exclude=['user', 'created_at', 'updated_at'])
        profile.save()

        logger.info(f"Created {role.lower()} user {email}")
        return user

    @staticmethod
    def get_user(user_id):
        """
        Raises:
            UserNotFound: no such user
        """
        return get_or_not_found(User.objects.select_related('profile'), user_id, UserNotFound, 'User')

    @staticmethod
    def get_role(user):
        """Role code of ``user``, or None when the user has no profile."""
        # Missing reverse one-to-one raises an AttributeError subclass
        profile = getattr(user, 'profile', None)
        return profile.role if profile is not None else None

    @staticmethod
    def get_users(role=None):
        """Active and inactive users, optionally limited to one role."""
        queryset = User.objects.select_related('profile').filter(profile__isnull=False)
        if role:
            queryset = queryset.filter(profile__role=role)
        return queryset.order_by('profile__full_name')

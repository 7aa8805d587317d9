# academics/services.py

"""
Class management services.
"""

from django.db import transaction
from django.core.exceptions import ValidationError
import logging

from .models import Class
from core.exceptions import ClassNotFound
from core.utils import get_or_not_found, validate_positive_amount

logger = logging.getLogger(__name__)


class ClassService:
    """Create and list school classes"""

    @staticmethod
    @transaction.atomic
    def create_class(name, monthly_fee, description=None, is_active=True):
        """
        Create a class.

        Args:
            name (str): Class name, e.g. "Primary 4"
            monthly_fee (Decimal | str | int): Standard monthly fee, > 0
            description (str, optional): Notes
            is_active (bool): Whether students can be enrolled

        Returns:
            Class instance

        Raises:
            ValidationError: empty name, or a fee that is not a valid positive amount
        """
        name = (name or '').strip()
        if not name:
            raise ValidationError({'name': "Class name is required."})

        monthly_fee = validate_positive_amount(monthly_fee, 'monthly_fee')

        class_instance = Class.objects.create(
            name=name,
            description=description or None,
            monthly_fee=monthly_fee,
            is_active=is_active,
        )

        logger.info(f"Created class {class_instance.name} (monthly fee {monthly_fee})")
        return class_instance

    @staticmethod
    def get_classes(include_inactive=False):
        """Active classes ordered by name (all classes when include_inactive)."""
        queryset = Class.objects.all()
        if not include_inactive:
            queryset = queryset.filter(is_active=True)
        return queryset.order_by('name')

    @staticmethod
    def get_class(class_id):
        """
        Raises:
            ClassNotFound: no such class
        """
        return get_or_not_found(Class.objects, class_id, ClassNotFound, 'Class')

# academics/models.py

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# CLASS MODEL
# =============================================================================

class Class(BaseModel):
    """A school class (grade/stream) with its standard monthly fee"""

    name = models.CharField("Class Name", max_length=100)
    description = models.TextField("Description", blank=True, null=True)

    monthly_fee = models.DecimalField(
        "Monthly Fee",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Standard monthly fee charged to students in this class"
    )

    # Status
    is_active = models.BooleanField("Is Active", default=True, db_index=True)

    # -------------------------------------------------------------------------
    # META CLASS
    # -------------------------------------------------------------------------

    class Meta:
        ordering = ['name']
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        constraints = [
            models.CheckConstraint(
                condition=Q(monthly_fee__gt=0),
                name='class_monthly_fee_positive'
            ),
        ]

    def __str__(self):
        return self.name

    def get_display_name(self):
        return self.name if self.is_active else f"{self.name} (inactive)"

    def get_current_enrollment_count(self):
        """Number of active students currently in this class"""
        return self.students.filter(is_active=True).count()

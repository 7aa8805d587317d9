# students/models.py

from django.db import models
from django.contrib.auth.models import User
from utils.models import BaseModel

import logging

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT MODEL
# =============================================================================

class Student(BaseModel):
    """Core model for student information"""

    # -------------------------------------------------------------------------
    # IDENTIFICATION & BASIC INFORMATION
    # -------------------------------------------------------------------------

    admission_number = models.CharField(
        "Admission Number",
        max_length=50,
        unique=True,
        help_text="School-issued student identifier"
    )
    full_name = models.CharField("Full Name", max_length=200)
    date_of_birth = models.DateField("Date of Birth")

    # -------------------------------------------------------------------------
    # FAMILY & ACADEMIC INFORMATION
    # -------------------------------------------------------------------------

    parent = models.ForeignKey(
        User,
        verbose_name="Parent",
        on_delete=models.PROTECT,
        related_name='children',
        help_text="Parent account responsible for this student's fees"
    )
    student_class = models.ForeignKey(
        'academics.Class',
        verbose_name="Class",
        on_delete=models.PROTECT,
        related_name='students'
    )
    enrollment_date = models.DateField("Enrollment Date")

    is_active = models.BooleanField("Is Active", default=True, db_index=True)

    class Meta:
        ordering = ['full_name']
        verbose_name = "Student"
        verbose_name_plural = "Students"
        indexes = [
            models.Index(fields=['parent', 'is_active'], name='student_parent_active_idx'),
            models.Index(fields=['student_class', 'is_active'], name='student_class_active_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.admission_number})"

    # -------------------------------------------------------------------------
    # PROPERTIES
    # -------------------------------------------------------------------------

    def get_full_name(self):
        return self.full_name

    def get_age(self):
        """Calculate student's age in years"""
        from core.utils import get_school_today
        today = get_school_today()
        born = self.date_of_birth
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))

    @property
    def parent_name(self):
        profile = getattr(self.parent, 'profile', None)
        return profile.full_name if profile else self.parent.get_full_name()

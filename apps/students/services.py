# students/services.py
"""
Business logic services for student management.
"""

from django.contrib.auth.models import User
from django.db import transaction
from django.core.exceptions import ValidationError
import logging

from .models import Student
from accounts.models import UserProfile
from academics.models import Class
from core.exceptions import StudentNotFound, UserNotFound, ClassNotFound
from core.utils import get_or_not_found

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT SERVICES
# =============================================================================

class StudentService:
    """Student registration and lookups"""

    @staticmethod
    @transaction.atomic
    def create_student(admission_number, full_name, date_of_birth, parent_id, class_id,
                       enrollment_date, is_active=True):
        """
        Register a student under a parent account and an active class.

        Args:
            admission_number (str): Unique school-issued identifier
            full_name (str): Student's name
            date_of_birth (date): Birth date
            parent_id: Primary key of a user with the PARENT role
            class_id: Primary key of an active Class
            enrollment_date (date): Date the student joined
            is_active (bool): Whether the student is currently enrolled

        Returns:
            Student instance

        Raises:
            UserNotFound: parent does not exist
            ClassNotFound: class does not exist
            ValidationError: user is not a parent, class inactive,
                duplicate admission number, or dates out of order
        """
        admission_number = (admission_number or '').strip()
        full_name = (full_name or '').strip()
        if not admission_number:
            raise ValidationError({'admission_number': "Admission number is required."})
        if not full_name:
            raise ValidationError({'full_name': "Full name is required."})

        parent = get_or_not_found(User.objects.select_related('profile'), parent_id, UserNotFound, 'Parent')
        profile = getattr(parent, 'profile', None)
        if profile is None or profile.role != UserProfile.PARENT:
            raise ValidationError({'parent_id': "User is not a parent."})

        class_instance = get_or_not_found(Class.objects, class_id, ClassNotFound, 'Class')
        if not class_instance.is_active:
            raise ValidationError({'class_id': f"Class {class_instance.name} is not active."})

        if Student.objects.filter(admission_number__iexact=admission_number).exists():
            raise ValidationError({'admission_number': f"Admission number {admission_number} already exists."})

        if date_of_birth and enrollment_date and enrollment_date < date_of_birth:
            raise ValidationError({'enrollment_date': "Enrollment date cannot be before date of birth."})

        student = Student.objects.create(
            admission_number=admission_number,
            full_name=full_name,
            date_of_birth=date_of_birth,
            parent=parent,
            student_class=class_instance,
            enrollment_date=enrollment_date,
            is_active=is_active,
        )

        logger.info(f"Registered student {student.full_name} ({student.admission_number}) in {class_instance.name}")
        return student

    @staticmethod
    def get_student(student_id):
        """
        Raises:
            StudentNotFound: no such student
        """
        return get_or_not_found(
            Student.objects.select_related('student_class', 'parent__profile'),
            student_id, StudentNotFound, 'Student'
        )

    @staticmethod
    def get_all_students(include_inactive=True):
        queryset = Student.objects.select_related('student_class', 'parent__profile')
        if not include_inactive:
            queryset = queryset.filter(is_active=True)
        return queryset.order_by('full_name')

    @staticmethod
    def get_students_by_parent(parent_id):
        """All students (active or not) belonging to a parent, by name."""
        return (
            Student.objects
            .select_related('student_class')
            .filter(parent_id=parent_id)
            .order_by('full_name')
        )

"""
Shared fixtures: one administrator, two parents, two classes, one student
per parent and a pending bill for the first student.
"""

from datetime import date
from decimal import Decimal

import pytest

from accounts.models import UserProfile
from accounts.services import UserService
from academics.services import ClassService
from students.services import StudentService
from fees.services import BillService


@pytest.fixture
def admin_user(db):
    return UserService.create_user('admin@school.test', 'admin-pass-123', 'School Admin', UserProfile.ADMIN)


@pytest.fixture
def parent(db):
    return UserService.create_user('parent@school.test', 'parent-pass-123', 'Jane Parent', UserProfile.PARENT)


@pytest.fixture
def other_parent(db):
    return UserService.create_user('other@school.test', 'other-pass-123', 'John Other', UserProfile.PARENT)


@pytest.fixture
def school_class(db):
    return ClassService.create_class('Primary 4', Decimal('150000.00'))


@pytest.fixture
def other_class(db):
    return ClassService.create_class('Primary 5', Decimal('175000.00'))


@pytest.fixture
def student(parent, school_class):
    return StudentService.create_student(
        admission_number='ADM-001',
        full_name='Amy Parent',
        date_of_birth=date(2015, 5, 1),
        parent_id=parent.pk,
        class_id=school_class.pk,
        enrollment_date=date(2021, 2, 1),
    )


@pytest.fixture
def other_student(other_parent, other_class):
    return StudentService.create_student(
        admission_number='ADM-002',
        full_name='Ben Other',
        date_of_birth=date(2014, 9, 12),
        parent_id=other_parent.pk,
        class_id=other_class.pk,
        enrollment_date=date(2020, 2, 1),
    )


@pytest.fixture
def bill(student):
    return BillService.create_bill(student.pk, 'MONTHLY_FEE', 'January fees', Decimal('100.00'), date(2024, 1, 31))


@pytest.fixture
def logged_in_client(client, admin_user):
    client.force_login(admin_user)
    return client

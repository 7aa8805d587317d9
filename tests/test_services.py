"""Accounts, classes, students, other income and expenses"""

from datetime import date
from decimal import Decimal
import uuid

import pytest
from django.core.exceptions import ValidationError

from accounts.models import UserProfile
from accounts.services import UserService
from academics.services import ClassService
from core.exceptions import UserNotFound, ClassNotFound
from finance.models import OtherIncome, Expense
from finance.services import IncomeService, ExpenseService
from students.services import StudentService
from utils.models import FinancialAuditLog


@pytest.mark.django_db
class TestUserService:

    def test_password_is_hashed(self, parent):
        assert parent.password != 'parent-pass-123'
        assert parent.check_password('parent-pass-123')
        assert parent.profile.role == UserProfile.PARENT
        assert parent.profile.full_name == 'Jane Parent'

    def test_admin_is_staff(self, admin_user):
        assert admin_user.is_staff
        assert UserService.get_role(admin_user) == UserProfile.ADMIN

    def test_duplicate_email_is_rejected(self, parent):
        with pytest.raises(ValidationError):
            UserService.create_user('PARENT@school.test', 'another-pass', 'Someone Else', UserProfile.PARENT)

    @pytest.mark.parametrize('email, password, name, role', [
        ('not-an-email', 'secret-123', 'Name', UserProfile.PARENT),
        ('a@school.test', '', 'Name', UserProfile.PARENT),
        ('a@school.test', 'secret-123', '', UserProfile.PARENT),
        ('a@school.test', 'secret-123', 'Name', 'BURSAR'),
    ])
    def test_invalid_input(self, db, email, password, name, role):
        with pytest.raises(ValidationError):
            UserService.create_user(email, password, name, role)

    def test_get_user_unknown(self, db):
        with pytest.raises(UserNotFound):
            UserService.get_user(987654)

    def test_get_users_by_role(self, admin_user, parent, other_parent):
        assert {u.pk for u in UserService.get_users(UserProfile.PARENT)} == {parent.pk, other_parent.pk}


@pytest.mark.django_db
class TestClassService:

    def test_fee_must_be_positive(self, db):
        with pytest.raises(ValidationError):
            ClassService.create_class('Primary 1', '0')

    def test_fee_must_fit_amount_column(self, db):
        with pytest.raises(ValidationError) as excinfo:
            ClassService.create_class('Primary 1', '10000000000.00')
        assert 'monthly_fee' in excinfo.value.message_dict

    def test_get_classes_lists_active_only(self, school_class):
        inactive = ClassService.create_class('Old class', '10.00', is_active=False)

        assert [c.pk for c in ClassService.get_classes()] == [school_class.pk]
        assert inactive.pk in {c.pk for c in ClassService.get_classes(include_inactive=True)}

    def test_unknown_class(self, db):
        with pytest.raises(ClassNotFound):
            ClassService.get_class(uuid.uuid4())


@pytest.mark.django_db
class TestStudentService:

    def student_data(self, parent, school_class, **overrides):
        data = {
            'admission_number': 'ADM-100',
            'full_name': 'Cara Parent',
            'date_of_birth': date(2016, 1, 1),
            'parent_id': parent.pk,
            'class_id': school_class.pk,
            'enrollment_date': date(2022, 2, 1),
        }
        data.update(overrides)
        return data

    def test_create(self, parent, school_class):
        student = StudentService.create_student(**self.student_data(parent, school_class))

        assert student.parent_id == parent.pk
        assert student.student_class_id == school_class.pk
        assert student.is_active

    def test_parent_must_have_parent_role(self, admin_user, school_class):
        with pytest.raises(ValidationError):
            StudentService.create_student(**self.student_data(admin_user, school_class))

    def test_class_must_be_active(self, parent):
        inactive = ClassService.create_class('Closed', '10.00', is_active=False)

        with pytest.raises(ValidationError):
            StudentService.create_student(**self.student_data(parent, inactive))

    def test_admission_number_is_unique(self, student, parent, school_class):
        with pytest.raises(ValidationError):
            StudentService.create_student(
                **self.student_data(parent, school_class, admission_number=student.admission_number)
            )

    def test_unknown_parent_and_class(self, parent, school_class):
        with pytest.raises(UserNotFound):
            StudentService.create_student(**self.student_data(parent, school_class, parent_id=987654))
        with pytest.raises(ClassNotFound):
            StudentService.create_student(**self.student_data(parent, school_class, class_id=uuid.uuid4()))

    def test_enrollment_before_birth(self, parent, school_class):
        with pytest.raises(ValidationError):
            StudentService.create_student(
                **self.student_data(parent, school_class, enrollment_date=date(2010, 1, 1))
            )

    def test_students_by_parent(self, student, other_student, parent):
        assert [s.pk for s in StudentService.get_students_by_parent(parent.pk)] == [student.pk]
        assert StudentService.get_all_students().count() == 2


@pytest.mark.django_db
class TestIncomeAndExpenses:

    def test_create_other_income(self, admin_user):
        income = IncomeService.create_other_income(
            'DONATION', 'Alumni gift', '500.00', date(2024, 3, 1), admin_user.pk, description='Class of 2001'
        )

        assert income.created_by_id == str(admin_user.pk)
        assert income.amount == Decimal('500.00')
        assert FinancialAuditLog.objects.filter(action='INCOME_CREATE', object_id=str(income.pk)).exists()

    def test_create_expense(self, admin_user):
        expense = ExpenseService.create_expense(
            'SALARY', 'March salaries', '2500.00', date(2024, 3, 31), admin_user, receipt_url='/receipts/1.pdf'
        )

        assert expense.created_by_id == str(admin_user.pk)
        assert expense.receipt_url == '/receipts/1.pdf'
        assert FinancialAuditLog.objects.get(action='EXPENSE_CREATE').user_id == str(admin_user.pk)

    def test_unknown_creator(self, db):
        with pytest.raises(UserNotFound):
            IncomeService.create_other_income('DONATION', 'Gift', '10.00', date(2024, 1, 1), 987654)
        with pytest.raises(UserNotFound):
            ExpenseService.create_expense('FOOD', 'Lunch', '10.00', date(2024, 1, 1), 987654)

    @pytest.mark.parametrize('category, amount, title', [
        ('LOTTERY', '10.00', 'Gift'),
        ('DONATION', '0', 'Gift'),
        ('DONATION', '10.00', ''),
        ('DONATION', '10000000000.00', 'Gift'),
    ])
    def test_invalid_income(self, admin_user, category, amount, title):
        with pytest.raises(ValidationError):
            IncomeService.create_other_income(category, title, amount, date(2024, 1, 1), admin_user)
        assert not OtherIncome.objects.exists()

    def test_expenses_newest_first(self, admin_user):
        first = ExpenseService.create_expense('FOOD', 'Lunch', '10.00', date(2024, 1, 1), admin_user)
        second = ExpenseService.create_expense('FOOD', 'Dinner', '12.00', date(2023, 12, 1), admin_user)

        assert [e.pk for e in ExpenseService.get_expenses()] == [second.pk, first.pk]
        assert Expense.objects.count() == 2

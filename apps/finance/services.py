# finance/services.py

"""
Other income and expense bookkeeping.

Both record kinds are entered by an administrator; the recording user is
kept in BaseModel.created_by_id. For period totals see finance/reports.py.
"""

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import transaction
from datetime import date, datetime
import logging

from finance.models import OtherIncome, Expense
from core.exceptions import UserNotFound
from core.utils import get_or_not_found, validate_positive_amount, validate_choice
from utils.models import FinancialAuditLog

logger = logging.getLogger(__name__)


def _clean_title(title):
    title = (title or '').strip()
    if not title:
        raise ValidationError({'title': "Title is required."})
    return title


def _clean_date(value, field):
    # DateField columns: a datetime is reduced to its calendar date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError({field: f"Invalid date: {value!r}"})


# =============================================================================
# OTHER INCOME
# =============================================================================

class IncomeService:

    @staticmethod
    @transaction.atomic
    def create_other_income(category, title, amount, income_date, created_by, description=None):
        """
        Record non-fee income.

        Args:
            category (str): One of OtherIncome.CATEGORY_CHOICES
            title (str): Short label
            amount (Decimal | str): > 0
            income_date (date): Day the money was received
            created_by: User instance or primary key of the recording admin
            description (str, optional): Details

        Returns:
            OtherIncome instance

        Raises:
            UserNotFound: ``created_by`` does not exist
            ValidationError: bad category, title, amount or date

        Example:
            IncomeService.create_other_income(
                'DONATION', 'Alumni gift', '500000.00', date(2024, 3, 1), request.user
            )
        """
        user = created_by if isinstance(created_by, User) else get_or_not_found(
            User.objects, created_by, UserNotFound, 'User'
        )
        validate_choice(category, OtherIncome.CATEGORY_CHOICES, 'category')
        amount = validate_positive_amount(amount)

        income = OtherIncome.objects.create(
            category=category,
            title=_clean_title(title),
            description=description or None,
            amount=amount,
            income_date=_clean_date(income_date, 'income_date'),
            created_by_id=str(user.pk),
        )

        FinancialAuditLog.log_financial_action(
            action='INCOME_CREATE',
            user=user,
            target_object=income,
            amount=amount,
            additional_data={'category': category, 'income_date': income.income_date.isoformat()},
        )

        logger.info(f"Recorded other income '{income.title}' ({category}): {amount} by {user.username}")
        return income

    @staticmethod
    def get_other_incomes():
        """All other income, newest first."""
        return OtherIncome.objects.order_by('-created_at')


# =============================================================================
# EXPENSES
# =============================================================================

class ExpenseService:

    @staticmethod
    @transaction.atomic
    def create_expense(category, title, amount, expense_date, created_by, description=None, receipt_url=None):
        """
        Record money spent by the school.

        Raises:
            UserNotFound: ``created_by`` does not exist
            ValidationError: bad category, title, amount or date
        """
        user = created_by if isinstance(created_by, User) else get_or_not_found(
            User.objects, created_by, UserNotFound, 'User'
        )
        validate_choice(category, Expense.CATEGORY_CHOICES, 'category')
        amount = validate_positive_amount(amount)

        expense = Expense.objects.create(
            category=category,
            title=_clean_title(title),
            description=description or None,
            amount=amount,
            expense_date=_clean_date(expense_date, 'expense_date'),
            receipt_url=receipt_url or None,
            created_by_id=str(user.pk),
        )

        FinancialAuditLog.log_financial_action(
            action='EXPENSE_CREATE',
            user=user,
            target_object=expense,
            amount=amount,
            additional_data={'category': category, 'expense_date': expense.expense_date.isoformat()},
        )

        logger.info(f"Recorded expense '{expense.title}' ({category}): {amount} by {user.username}")
        return expense

    @staticmethod
    def get_expenses():
        """All expenses, newest first."""
        return Expense.objects.order_by('-created_at')

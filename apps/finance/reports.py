# finance/reports.py

"""
Financial Report Aggregation

Period totals and detail rows for the school's money flows:

    student_payments  Payment.amount by payment_date
    other_income      OtherIncome.amount by income_date
    savings_deposits  SavingsTransaction.amount (deposits) by transaction_date
    total_expenses    Expense.amount by expense_date

Every function here is a read; nothing is written. Filters are described
by FinancialReportFilters, which also decides which relations each query
has to traverse.

Date handling:
    start_date / end_date may be dates or datetimes. For timestamp columns a
    date-only start means the start of that day and a date-only end means
    the end of that day (school timezone). Date columns compare on calendar
    dates.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from django.db.models import Sum
from django.db.models.functions import Coalesce
import logging

from fees.models import Bill, Payment
from savings.models import SavingsTransaction
from finance.models import OtherIncome, Expense
from core.utils import (
    get_school_current_time, start_of_year, start_of_day, end_of_day,
    localize_datetime, as_school_date, to_money,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


# =============================================================================
# FILTERS
# =============================================================================

@dataclass(frozen=True)
class FinancialReportFilters:
    """
    Optional, conjunctive report filters.

    Example:
        filters = FinancialReportFilters(
            start_date=date(2024, 1, 1), end_date=date(2024, 1, 31),
            student_id=student.id,
        )
    """
    start_date: date | datetime | None = None
    end_date: date | datetime | None = None
    student_id: object = None
    class_id: object = None
    payment_status: str | None = None
    bill_type: str | None = None

    @classmethod
    def from_data(cls, data):
        """Build from a dict (e.g. form cleaned_data), ignoring empty values."""
        fields = cls.__dataclass_fields__
        return cls(**{key: value for key, value in data.items() if key in fields and value not in (None, '')})

    def resolved(self):
        """Copy with the default period filled in: 1 January this year to now."""
        return replace(
            self,
            start_date=self.start_date if self.start_date is not None else start_of_year(),
            end_date=self.end_date if self.end_date is not None else get_school_current_time(),
        )

    # -------------------------------------------------------------------------
    # JOIN DECISIONS
    # -------------------------------------------------------------------------

    @property
    def requires_bill_join(self):
        """Payments are only traversed to Bill when a bill-level filter is set."""
        return bool(self.student_id or self.class_id or self.bill_type)

    @property
    def requires_student_join(self):
        return bool(self.class_id)

    # -------------------------------------------------------------------------
    # PERIOD BOUNDS
    # -------------------------------------------------------------------------

    @property
    def period_start(self):
        value = self.start_date if self.start_date is not None else start_of_year()
        if isinstance(value, datetime):
            return localize_datetime(value)
        return start_of_day(value)

    @property
    def period_end(self):
        value = self.end_date if self.end_date is not None else get_school_current_time()
        if isinstance(value, datetime):
            return localize_datetime(value)
        return end_of_day(value)

    def _timestamp_range(self, field):
        return {f'{field}__gte': self.period_start, f'{field}__lte': self.period_end}

    def _date_range(self, field):
        return {
            f'{field}__gte': as_school_date(self.period_start),
            f'{field}__lte': as_school_date(self.period_end),
        }

    # -------------------------------------------------------------------------
    # ORM LOOKUPS PER RECORD KIND
    # -------------------------------------------------------------------------

    def payment_lookups(self):
        lookups = self._timestamp_range('payment_date')
        if self.payment_status:
            lookups['status'] = self.payment_status
        if self.requires_bill_join:
            if self.student_id:
                lookups['bill__student_id'] = self.student_id
            if self.bill_type:
                lookups['bill__bill_type'] = self.bill_type
            if self.requires_student_join:
                lookups['bill__student__student_class_id'] = self.class_id
        return lookups

    def bill_lookups(self):
        lookups = self._timestamp_range('created_at')
        if self.student_id:
            lookups['student_id'] = self.student_id
        if self.bill_type:
            lookups['bill_type'] = self.bill_type
        if self.requires_student_join:
            lookups['student__student_class_id'] = self.class_id
        return lookups

    def savings_lookups(self):
        lookups = self._timestamp_range('transaction_date')
        if self.student_id:
            lookups['student_id'] = self.student_id
        if self.requires_student_join:
            lookups['student__student_class_id'] = self.class_id
        return lookups

    def other_income_lookups(self):
        return self._date_range('income_date')

    def expense_lookups(self):
        return self._date_range('expense_date')


def _sum_amount(queryset):
    total = queryset.aggregate(total=Coalesce(Sum('amount'), ZERO))['total']
    return to_money(total)


# =============================================================================
# SUMMARY REPORT
# =============================================================================

def generate_financial_report(filters=None):
    """
    Period totals for the dashboard and report summary endpoint.

    Args:
        filters (FinancialReportFilters, optional)

    Returns:
        dict: student_payments, other_income, savings_deposits,
        total_expenses, total_income, net_income, period_start, period_end

    Example:
        >>> report = generate_financial_report(FinancialReportFilters(student_id=student.id))
        >>> report['net_income']
    """
    filters = (filters or FinancialReportFilters()).resolved()

    student_payments = _sum_amount(Payment.objects.filter(**filters.payment_lookups()))
    other_income = _sum_amount(OtherIncome.objects.filter(**filters.other_income_lookups()))
    savings_deposits = _sum_amount(
        SavingsTransaction.objects.deposits().filter(**filters.savings_lookups())
    )
    total_expenses = _sum_amount(Expense.objects.filter(**filters.expense_lookups()))

    total_income = student_payments + other_income
    net_income = total_income - total_expenses

    logger.debug(
        f"Financial report {filters.period_start:%Y-%m-%d}..{filters.period_end:%Y-%m-%d}: "
        f"income {total_income}, expenses {total_expenses}"
    )

    return {
        'student_payments': student_payments,
        'other_income': other_income,
        'savings_deposits': savings_deposits,
        'total_expenses': total_expenses,
        'total_income': total_income,
        'net_income': net_income,
        'period_start': filters.start_date,
        'period_end': filters.end_date,
    }


# =============================================================================
# DETAIL ROWS
# =============================================================================

def get_bills_data(filters):
    filters = filters.resolved()
    bills = (
        Bill.objects
        .select_related('student', 'student__student_class')
        .filter(**filters.bill_lookups())
        .order_by('created_at')
    )
    return [
        {
            'id': str(bill.pk),
            'student_name': bill.student.full_name,
            'class_name': bill.student.student_class.name,
            'bill_type': bill.bill_type,
            'title': bill.title,
            'amount': bill.amount,
            'due_date': bill.due_date,
            'status': bill.status,
            'created_at': bill.created_at,
        }
        for bill in bills
    ]


def get_payments_data(filters):
    filters = filters.resolved()
    payments = (
        Payment.objects
        .select_related('bill', 'bill__student', 'bill__student__student_class')
        .filter(**filters.payment_lookups())
        .order_by('payment_date')
    )
    return [
        {
            'id': str(payment.pk),
            'student_name': payment.bill.student.full_name,
            'class_name': payment.bill.student.student_class.name,
            'bill_title': payment.bill.title,
            'amount': payment.amount,
            'payment_method': payment.payment_method,
            'payment_date': payment.payment_date,
            'status': payment.status,
            'reference_number': payment.reference_number,
        }
        for payment in payments
    ]


def get_savings_data(filters):
    """Deposits and withdrawals in recording order per student."""
    filters = filters.resolved()
    entries = (
        SavingsTransaction.objects
        .select_related('student', 'student__student_class')
        .filter(**filters.savings_lookups())
        .order_by('transaction_date', 'student_id', 'sequence')
    )
    return [
        {
            'id': str(entry.pk),
            'student_name': entry.student.full_name,
            'class_name': entry.student.student_class.name,
            'transaction_type': entry.transaction_type,
            'amount': entry.amount,
            'balance_after': entry.balance_after,
            'transaction_date': entry.transaction_date,
            'description': entry.description,
        }
        for entry in entries
    ]


def get_other_incomes_data(filters):
    filters = filters.resolved()
    return [
        {
            'id': str(income.pk),
            'category': income.category,
            'title': income.title,
            'amount': income.amount,
            'income_date': income.income_date,
            'description': income.description,
        }
        for income in OtherIncome.objects.filter(**filters.other_income_lookups()).order_by('income_date')
    ]


def get_expenses_data(filters):
    filters = filters.resolved()
    return [
        {
            'id': str(expense.pk),
            'category': expense.category,
            'title': expense.title,
            'amount': expense.amount,
            'expense_date': expense.expense_date,
            'description': expense.description,
        }
        for expense in Expense.objects.filter(**filters.expense_lookups()).order_by('expense_date')
    ]


def collect_report_data(filters=None):
    """
    All detail rows for an exported report plus their summary.

    Returns:
        dict: filters, bills, payments, savings, other_incomes, expenses, summary
    """
    filters = (filters or FinancialReportFilters()).resolved()

    bills = get_bills_data(filters)
    payments = get_payments_data(filters)
    savings = get_savings_data(filters)
    other_incomes = get_other_incomes_data(filters)
    expenses = get_expenses_data(filters)

    def total(rows):
        return sum((row['amount'] for row in rows), ZERO)

    total_payment_amount = total(payments)
    total_other_income = total(other_incomes)
    total_expenses = total(expenses)

    summary = {
        'total_bill_amount': total(bills),
        'total_payment_amount': total_payment_amount,
        'total_savings_deposits': total(
            row for row in savings if row['transaction_type'] == SavingsTransaction.DEPOSIT
        ),
        'total_savings_withdrawals': total(
            row for row in savings if row['transaction_type'] == SavingsTransaction.WITHDRAWAL
        ),
        'total_other_income': total_other_income,
        'total_expenses': total_expenses,
        'net_income': total_payment_amount + total_other_income - total_expenses,
    }

    return {
        'filters': filters,
        'bills': bills,
        'payments': payments,
        'savings': savings,
        'other_incomes': other_incomes,
        'expenses': expenses,
        'summary': summary,
    }

# savings/services.py

"""
Student Savings Ledger

Each student's savings are an append-only list of SavingsTransaction rows.
The balance is never stored anywhere else: it is the ``balance_after`` of
the most recently recorded row.

Concurrency:
    record_transaction locks the student row for the read-then-write, so
    appends for one student are serialized while different students never
    contend. SQLite ignores SELECT ... FOR UPDATE; there the IMMEDIATE
    transaction mode (see settings) makes every writer wait its turn at BEGIN.
    The (student, sequence) unique constraint catches any append that slips
    past the lock; the loser re-reads the balance and retries a bounded
    number of times. Any other integrity error is raised unchanged.
"""

from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from decimal import Decimal
import logging

from savings.models import SavingsTransaction
from students.models import Student
from core.exceptions import StudentNotFound, InsufficientFunds, LedgerConflict
from core.utils import (
    MAX_BALANCE, get_or_not_found, validate_positive_amount, validate_choice, coerce_datetime,
)
from utils.models import FinancialAuditLog

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

# Attempts before a persistent sequence collision is reported as LedgerConflict
MAX_APPEND_ATTEMPTS = 3

SEQUENCE_CONSTRAINT = 'savings_student_sequence_unique'


def is_sequence_collision(error):
    """
    True when ``error`` is a duplicate (student, sequence) insert.

    PostgreSQL names the constraint in its message; SQLite lists the
    columns instead ("UNIQUE constraint failed: <table>.student_id, <table>.sequence").
    """
    message = str(error)
    if SEQUENCE_CONSTRAINT in message:
        return True
    table = SavingsTransaction._meta.db_table
    return (
        'UNIQUE' in message
        and f'{table}.student_id' in message
        and f'{table}.sequence' in message
    )


# =============================================================================
# SAVINGS LEDGER SERVICE
# =============================================================================

class SavingsLedgerService:
    """
    Deposits, withdrawals and balance queries for student savings.
    """

    @staticmethod
    def record_transaction(student_id, transaction_type, amount, transaction_date, description=None):
        """
        Append a deposit or withdrawal to a student's savings ledger.

        Args:
            student_id: Student primary key
            transaction_type (str): SavingsTransaction.DEPOSIT or WITHDRAWAL
            amount (Decimal | str): > 0
            transaction_date (datetime | date): Business date of the entry.
                Does not affect balance computation, which follows
                recording order.
            description (str, optional): Free text

        Returns:
            SavingsTransaction: the new row, with ``balance_after`` set

        Raises:
            StudentNotFound: student does not exist
            InsufficientFunds: withdrawal exceeds the current balance
            ValidationError: bad amount, type or date, or a balance above MAX_BALANCE
            LedgerConflict: concurrent appends kept colliding

        Example:
            SavingsLedgerService.record_transaction(
                student.id, SavingsTransaction.DEPOSIT, '50.00', get_school_current_time()
            )
        """
        validate_choice(transaction_type, SavingsTransaction.TRANSACTION_TYPES, 'transaction_type')
        amount = validate_positive_amount(amount)
        transaction_date = coerce_datetime(transaction_date, 'transaction_date')

        for attempt in range(1, MAX_APPEND_ATTEMPTS + 1):
            try:
                with transaction.atomic():
                    return SavingsLedgerService._append(
                        student_id, transaction_type, amount, transaction_date, description
                    )
            except IntegrityError as e:
                if not is_sequence_collision(e):
                    raise
                logger.warning(
                    f"Savings append for student {student_id} collided "
                    f"(attempt {attempt}/{MAX_APPEND_ATTEMPTS}): {e}"
                )

        raise LedgerConflict(
            f"Could not record savings transaction for student {student_id} "
            f"after {MAX_APPEND_ATTEMPTS} attempts"
        )

    @staticmethod
    def _append(student_id, transaction_type, amount, transaction_date, description):
        """Read the latest balance and write the next row. Caller holds a transaction."""
        student = get_or_not_found(
            Student.objects.select_for_update(), student_id, StudentNotFound, 'Student'
        )

        last = SavingsTransaction.objects.for_student(student.pk).latest_recorded()
        current_balance = last.balance_after if last else ZERO
        next_sequence = last.sequence + 1 if last else 1

        if transaction_type == SavingsTransaction.DEPOSIT:
            new_balance = current_balance + amount
            if new_balance > MAX_BALANCE:
                raise ValidationError({
                    'amount': f"Deposit would take the savings balance above {MAX_BALANCE:,}."
                })
        else:
            new_balance = current_balance - amount
            if new_balance < ZERO:
                logger.info(
                    f"Rejected withdrawal of {amount} for {student.full_name}: balance {current_balance}"
                )
                raise InsufficientFunds(student.pk, current_balance, amount)

        entry = SavingsTransaction.objects.create(
            student=student,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=new_balance,
            sequence=next_sequence,
            description=description or None,
            transaction_date=transaction_date,
        )

        FinancialAuditLog.log_financial_action(
            action='SAVINGS_DEPOSIT' if transaction_type == SavingsTransaction.DEPOSIT else 'SAVINGS_WITHDRAWAL',
            target_object=entry,
            amount=amount,
            student=student,
            additional_data={
                'sequence': next_sequence,
                'balance_before': str(current_balance),
                'balance_after': str(new_balance),
            },
            notes=description,
        )

        logger.info(
            f"Recorded savings {transaction_type.lower()} of {amount} for {student.full_name}; "
            f"balance {current_balance} -> {new_balance}"
        )
        return entry

    @staticmethod
    def get_current_balance(student_id):
        """
        Current savings balance: ``balance_after`` of the most recently
        recorded transaction, or 0.00 when there is none (including for an
        unknown student).
        """
        try:
            last = SavingsTransaction.objects.for_student(student_id).latest_recorded()
        except (ValidationError, ValueError, TypeError):
            return ZERO
        return last.balance_after if last else ZERO

    @staticmethod
    def list_transactions(student_id):
        """
        All of a student's transactions, newest ``transaction_date`` first
        (ties: most recently recorded first). Empty for an unknown student.
        """
        try:
            return list(
                SavingsTransaction.objects
                .for_student(student_id)
                .in_display_order()
            )
        except (ValidationError, ValueError, TypeError):
            return []

    @staticmethod
    def verify_ledger(student_id):
        """
        Re-derive every balance of a student's ledger from zero.

        Returns:
            list[dict]: one entry per inconsistent row (empty when the ledger
            is consistent), each with id, sequence, stored_balance,
            expected_balance and problem
        """
        problems = []
        running = ZERO
        expected_sequence = 1

        for entry in SavingsTransaction.objects.for_student(student_id).in_recording_order():
            running += entry.signed_amount

            if entry.sequence != expected_sequence:
                problems.append({
                    'id': str(entry.pk),
                    'sequence': entry.sequence,
                    'stored_balance': entry.balance_after,
                    'expected_balance': running,
                    'problem': f"sequence gap (expected {expected_sequence})",
                })
            elif entry.balance_after != running:
                problems.append({
                    'id': str(entry.pk),
                    'sequence': entry.sequence,
                    'stored_balance': entry.balance_after,
                    'expected_balance': running,
                    'problem': "balance mismatch",
                })
            elif running < ZERO:
                problems.append({
                    'id': str(entry.pk),
                    'sequence': entry.sequence,
                    'stored_balance': entry.balance_after,
                    'expected_balance': running,
                    'problem': "negative balance",
                })
            expected_sequence = entry.sequence + 1

        if problems:
            logger.error(f"Savings ledger for student {student_id} has {len(problems)} inconsistent row(s)")
        return problems

    @staticmethod
    def get_savings_summary(student_id):
        """Totals for a student's savings page."""
        queryset = SavingsTransaction.objects.for_student(student_id)
        totals = queryset.aggregate(
            total_deposits=Coalesce(Sum('amount', filter=Q(transaction_type=SavingsTransaction.DEPOSIT)), ZERO),
            total_withdrawals=Coalesce(Sum('amount', filter=Q(transaction_type=SavingsTransaction.WITHDRAWAL)), ZERO),
        )
        return {
            'balance': SavingsLedgerService.get_current_balance(student_id),
            'total_deposits': totals['total_deposits'],
            'total_withdrawals': totals['total_withdrawals'],
            'transaction_count': queryset.count(),
        }

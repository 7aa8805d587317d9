# savings/models.py

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel
from students.models import Student
from core.exceptions import ImmutableRecordError

logger = logging.getLogger(__name__)


# =============================================================================
# QUERYSETS
# =============================================================================

class SavingsTransactionQuerySet(models.QuerySet):
    """Ledger queries; bulk update/delete are refused like instance writes."""

    def for_student(self, student_id):
        return self.filter(student_id=student_id)

    def in_recording_order(self):
        return self.order_by('sequence')

    def in_display_order(self):
        """Newest transaction date first; same-date rows newest recorded first."""
        return self.order_by('-transaction_date', '-sequence')

    def latest_recorded(self):
        return self.order_by('-sequence').first()

    def deposits(self):
        return self.filter(transaction_type=SavingsTransaction.DEPOSIT)

    def withdrawals(self):
        return self.filter(transaction_type=SavingsTransaction.WITHDRAWAL)

    def update(self, **kwargs):
        raise ImmutableRecordError("Savings transactions cannot be updated")

    def delete(self):
        raise ImmutableRecordError("Savings transactions cannot be deleted")


# =============================================================================
# SAVINGS TRANSACTION MODEL
# =============================================================================

class SavingsTransaction(BaseModel):
    """
    One append-only entry in a student's savings ledger.

    For each student, rows in ``sequence`` order satisfy

        balance_after[n] = balance_after[n-1] +/- amount[n]   (opening balance 0)

    and ``balance_after`` is never negative. Rows are written once by
    SavingsLedgerService.record_transaction and never changed afterwards.
    """

    DEPOSIT = 'DEPOSIT'
    WITHDRAWAL = 'WITHDRAWAL'

    TRANSACTION_TYPES = [
        (DEPOSIT, 'Deposit'),
        (WITHDRAWAL, 'Withdrawal'),
    ]

    # -------------------------------------------------------------------------
    # CORE RELATIONSHIPS
    # -------------------------------------------------------------------------

    student = models.ForeignKey(
        Student,
        verbose_name="Student",
        on_delete=models.PROTECT,
        related_name='savings_transactions'
    )
    transaction_type = models.CharField(
        "Transaction Type",
        max_length=15,
        choices=TRANSACTION_TYPES,
        db_index=True
    )

    # -------------------------------------------------------------------------
    # AMOUNTS
    # -------------------------------------------------------------------------

    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    balance_after = models.DecimalField(
        "Balance After Transaction",
        max_digits=14,
        decimal_places=2
    )

    # -------------------------------------------------------------------------
    # ORDERING & METADATA
    # -------------------------------------------------------------------------

    sequence = models.PositiveIntegerField(
        "Sequence",
        editable=False,
        help_text="Per-student recording order, starting at 1"
    )
    description = models.TextField("Description", blank=True, null=True)
    transaction_date = models.DateTimeField("Transaction Date", db_index=True)

    objects = SavingsTransactionQuerySet.as_manager()

    class Meta:
        verbose_name = "Savings Transaction"
        verbose_name_plural = "Savings Transactions"
        ordering = ['-transaction_date', '-sequence']
        constraints = [
            models.UniqueConstraint(fields=['student', 'sequence'], name='savings_student_sequence_unique'),
            models.CheckConstraint(condition=Q(amount__gt=0), name='savings_amount_positive'),
            models.CheckConstraint(condition=Q(balance_after__gte=0), name='savings_balance_non_negative'),
        ]
        indexes = [
            models.Index(fields=['student', '-transaction_date'], name='savings_student_date_idx'),
            models.Index(fields=['transaction_type', 'transaction_date'], name='savings_type_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_transaction_type_display()} - {self.amount}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(f"Savings transaction {self.pk} is immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(f"Savings transaction {self.pk} cannot be deleted")

    @property
    def signed_amount(self):
        return self.amount if self.transaction_type == self.DEPOSIT else -self.amount

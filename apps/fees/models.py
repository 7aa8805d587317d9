# fees/models.py

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel
from students.models import Student
from core.exceptions import InvalidBillTransition

logger = logging.getLogger(__name__)


# =============================================================================
# BILL MODEL
# =============================================================================

class Bill(BaseModel):
    """
    An amount owed by a student for a single charge (monthly fee,
    registration, uniform, ...).

    Status moves only along ALLOWED_TRANSITIONS:

        PENDING -> PAID | OVERDUE | CANCELLED
        OVERDUE -> PAID | CANCELLED
        PAID, CANCELLED: terminal
    """

    PENDING = 'PENDING'
    PAID = 'PAID'
    OVERDUE = 'OVERDUE'
    CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (PENDING, 'Pending Payment'),
        (PAID, 'Paid'),
        (OVERDUE, 'Overdue'),
        (CANCELLED, 'Cancelled'),
    ]

    ALLOWED_TRANSITIONS = {
        PENDING: {PAID, OVERDUE, CANCELLED},
        OVERDUE: {PAID, CANCELLED},
        PAID: set(),
        CANCELLED: set(),
    }

    # Statuses a parent still has to act on
    ACTIVE_STATUSES = [PENDING, OVERDUE]

    BILL_TYPE_CHOICES = [
        ('MONTHLY_FEE', 'Monthly Fee'),
        ('REGISTRATION', 'Registration'),
        ('ACTIVITY', 'Activity'),
        ('UNIFORM', 'Uniform'),
        ('BOOK', 'Books'),
        ('OTHER', 'Other'),
    ]

    # -------------------------------------------------------------------------
    # IDENTIFICATION
    # -------------------------------------------------------------------------

    student = models.ForeignKey(
        Student,
        verbose_name="Student",
        on_delete=models.PROTECT,
        related_name='bills'
    )
    bill_type = models.CharField("Bill Type", max_length=20, choices=BILL_TYPE_CHOICES, db_index=True)
    title = models.CharField("Title", max_length=200)
    description = models.TextField("Description", blank=True, null=True)

    # -------------------------------------------------------------------------
    # AMOUNT & DATES
    # -------------------------------------------------------------------------

    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    due_date = models.DateField("Due Date", db_index=True)

    # -------------------------------------------------------------------------
    # STATUS
    # -------------------------------------------------------------------------

    status = models.CharField("Status", max_length=15, choices=STATUS_CHOICES, default=PENDING, db_index=True)

    class Meta:
        verbose_name = "Bill"
        verbose_name_plural = "Bills"
        ordering = ['-due_date', '-created_at']
        indexes = [
            models.Index(fields=['student', 'status'], name='bill_student_status_idx'),
            models.Index(fields=['status', 'due_date'], name='bill_status_due_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name='bill_amount_positive'),
        ]

    def __str__(self):
        return f"{self.title} - {self.student.full_name}"

    # -------------------------------------------------------------------------
    # STATE MACHINE
    # -------------------------------------------------------------------------

    def can_transition_to(self, new_status):
        return new_status in self.ALLOWED_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status, reason=None):
        """
        Move the bill to ``new_status`` and save.

        Raises:
            InvalidBillTransition: move not in ALLOWED_TRANSITIONS
        """
        if not self.can_transition_to(new_status):
            raise InvalidBillTransition(self.pk, self.status, new_status)

        old_status = self.status
        self.status = new_status
        if reason:
            self.set_change_reason(reason[:255])
        self.save(update_fields=['status', 'change_reason', 'updated_by_id', 'updated_from_ip'])

        logger.info(f"Bill {self.pk} moved from {old_status} to {new_status}")
        return old_status

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES


# =============================================================================
# PAYMENT MODEL
# =============================================================================

class Payment(BaseModel):
    """A payment received against a bill. A bill may carry several."""

    PAYMENT_STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('COMPLETED', 'Completed'),
        ('FAILED', 'Failed'),
        ('REFUNDED', 'Refunded'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('CASH', 'Cash'),
        ('BANK_TRANSFER', 'Bank Transfer'),
        ('CREDIT_CARD', 'Credit Card'),
        ('DIGITAL_WALLET', 'Digital Wallet'),
    ]

    # -------------------------------------------------------------------------
    # IDENTIFICATION
    # -------------------------------------------------------------------------

    bill = models.ForeignKey(
        Bill,
        verbose_name="Bill",
        on_delete=models.PROTECT,
        related_name='payments'
    )

    # -------------------------------------------------------------------------
    # PAYMENT DETAILS
    # -------------------------------------------------------------------------

    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method = models.CharField("Payment Method", max_length=20, choices=PAYMENT_METHOD_CHOICES)
    payment_date = models.DateTimeField("Payment Date", db_index=True)
    status = models.CharField(
        "Status",
        max_length=15,
        choices=PAYMENT_STATUS_CHOICES,
        default='PENDING',
        db_index=True
    )

    # -------------------------------------------------------------------------
    # REFERENCES
    # -------------------------------------------------------------------------

    reference_number = models.CharField("Reference Number", max_length=100, blank=True, null=True)
    notes = models.TextField("Notes", blank=True, null=True)
    receipt_url = models.CharField("Receipt URL", max_length=500, blank=True, null=True)

    class Meta:
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        ordering = ['-payment_date', '-created_at']
        indexes = [
            models.Index(fields=['bill', 'status'], name='payment_bill_status_idx'),
            models.Index(fields=['payment_date', 'status'], name='payment_date_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name='payment_amount_positive'),
        ]

    def __str__(self):
        return f"Payment {self.amount} for {self.bill.title}"

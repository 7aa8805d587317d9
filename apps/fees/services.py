# fees/services.py

"""
Core Bill and Payment Operations

Bills move through a small state machine declared on Bill.ALLOWED_TRANSITIONS;
every status change in this module goes through Bill.transition_to().

For PDF payment receipts, see fees/receipts.py
"""

from django.db import transaction
from django.core.exceptions import ValidationError
from datetime import date
import logging

from fees.models import Bill, Payment
from students.models import Student
from core.exceptions import BillNotFound, PaymentNotFound, StudentNotFound, InvalidBillTransition
from core.utils import (
    get_or_not_found, get_school_today, validate_positive_amount,
    validate_choice, coerce_datetime,
)
from utils.models import FinancialAuditLog

logger = logging.getLogger(__name__)


# =============================================================================
# BILL SERVICE - BILL LIFECYCLE
# =============================================================================

class BillService:
    """
    Bill creation, lookups and administrative status changes.
    """

    @staticmethod
    @transaction.atomic
    def create_bill(student_id, bill_type, title, amount, due_date, description=None):
        """
        Create a PENDING bill for a student.

        Args:
            student_id: Student primary key
            bill_type (str): One of Bill.BILL_TYPE_CHOICES
            title (str): Short label shown to parents
            amount (Decimal | str): Amount owed, > 0
            due_date (date): When payment is due
            description (str, optional): Details

        Returns:
            Bill instance

        Raises:
            StudentNotFound: student does not exist
            ValidationError: bad type, title or amount

        Example:
            bill = BillService.create_bill(
                student.id, 'MONTHLY_FEE', 'January fees', '150000.00', date(2024, 1, 31)
            )
        """
        student = get_or_not_found(Student.objects, student_id, StudentNotFound, 'Student')
        validate_choice(bill_type, Bill.BILL_TYPE_CHOICES, 'bill_type')
        amount = validate_positive_amount(amount)
        title = (title or '').strip()
        if not title:
            raise ValidationError({'title': "Title is required."})
        if not isinstance(due_date, date):
            raise ValidationError({'due_date': f"Invalid due date: {due_date!r}"})

        bill = Bill.objects.create(
            student=student,
            bill_type=bill_type,
            title=title,
            description=description or None,
            amount=amount,
            due_date=due_date,
            status=Bill.PENDING,
        )

        FinancialAuditLog.log_financial_action(
            action='BILL_CREATE',
            target_object=bill,
            amount=amount,
            student=student,
            additional_data={'bill_type': bill_type, 'due_date': due_date.isoformat()},
        )

        logger.info(f"Created bill {bill.pk} '{title}' for {student.full_name}: {amount}")
        return bill

    @staticmethod
    def get_bill(bill_id):
        """
        Raises:
            BillNotFound: no such bill
        """
        return get_or_not_found(Bill.objects.select_related('student'), bill_id, BillNotFound, 'Bill')

    @staticmethod
    def get_bills_by_student(student_id):
        """All bills of a student, latest due first."""
        return (
            Bill.objects
            .select_related('student')
            .filter(student_id=student_id)
            .order_by('-due_date', '-created_at')
        )

    @staticmethod
    def get_active_bills_by_parent(parent_id):
        """
        Bills still awaiting payment (PENDING or OVERDUE) across all of a
        parent's children, earliest due first.
        """
        return (
            Bill.objects
            .select_related('student')
            .filter(student__parent_id=parent_id)
            .exclude(status__in=[Bill.PAID, Bill.CANCELLED])
            .order_by('due_date', 'created_at')
        )

    @staticmethod
    @transaction.atomic
    def cancel_bill(bill_id, reason):
        """
        Cancel a PENDING or OVERDUE bill.

        Raises:
            BillNotFound: no such bill
            InvalidBillTransition: bill already PAID or CANCELLED
            ValidationError: no reason given
        """
        reason = (reason or '').strip()
        if not reason:
            raise ValidationError({'reason': "A cancellation reason is required."})

        bill = get_or_not_found(
            Bill.objects.select_for_update().select_related('student'),
            bill_id, BillNotFound, 'Bill'
        )
        old_status = bill.transition_to(Bill.CANCELLED, reason=f"CANCELLED: {reason}")

        FinancialAuditLog.log_financial_action(
            action='BILL_STATUS_CHANGE',
            target_object=bill,
            amount=bill.amount,
            student=bill.student,
            additional_data={'from': old_status, 'to': Bill.CANCELLED},
            notes=reason,
        )

        logger.info(f"Cancelled bill {bill.pk}: {reason}")
        return bill

    @staticmethod
    @transaction.atomic
    def mark_overdue_bills(as_of=None):
        """
        Move PENDING bills whose due date has passed to OVERDUE.

        Args:
            as_of (date, optional): Reference day (default: school today).
                Bills due strictly before this day are overdue.

        Returns:
            int: number of bills marked
        """
        as_of = as_of or get_school_today()
        bills = (
            Bill.objects
            .select_for_update()
            .select_related('student')
            .filter(status=Bill.PENDING, due_date__lt=as_of)
            .order_by('due_date')
        )

        count = 0
        for bill in bills:
            bill.transition_to(Bill.OVERDUE, reason=f"Past due as of {as_of.isoformat()}")
            FinancialAuditLog.log_financial_action(
                action='BILL_STATUS_CHANGE',
                target_object=bill,
                amount=bill.amount,
                student=bill.student,
                additional_data={'from': Bill.PENDING, 'to': Bill.OVERDUE},
            )
            count += 1

        logger.info(f"Marked {count} bill(s) overdue as of {as_of}")
        return count


# =============================================================================
# PAYMENT SERVICE
# =============================================================================

class PaymentService:
    """
    Records payments against bills.
    """

    @staticmethod
    @transaction.atomic
    def create_payment(bill_id, amount, payment_method, payment_date, reference_number=None, notes=None):
        """
        Record a completed payment and settle the bill.

        The payment row, the bill status change and the audit entry are
        written in one transaction; any failure rolls all of them back.

        The amount is not compared with the bill amount: any positive
        payment marks the bill PAID. A mismatch is logged as a warning.

        Args:
            bill_id: Bill primary key
            amount (Decimal | str): Amount received, > 0
            payment_method (str): One of Payment.PAYMENT_METHOD_CHOICES
            payment_date (datetime | date): When the money was received
            reference_number (str, optional): Bank/wallet reference
            notes (str, optional): Free text

        Returns:
            Payment instance (status COMPLETED)

        Raises:
            BillNotFound: bill does not exist
            ValidationError: non-positive amount, unknown method, bad date
            InvalidBillTransition: bill is CANCELLED

        Example:
            payment = PaymentService.create_payment(
                bill.id, '100.00', 'CASH', get_school_current_time()
            )
        """
        amount = validate_positive_amount(amount)
        validate_choice(payment_method, Payment.PAYMENT_METHOD_CHOICES, 'payment_method')
        payment_date = coerce_datetime(payment_date, 'payment_date')

        # Lock the bill so concurrent payments serialize on its status
        bill = get_or_not_found(
            Bill.objects.select_for_update().select_related('student'),
            bill_id, BillNotFound, 'Bill'
        )

        if bill.status == Bill.CANCELLED:
            raise InvalidBillTransition(bill.pk, bill.status, Bill.PAID)

        if amount != bill.amount:
            logger.warning(
                f"Payment amount {amount} differs from bill {bill.pk} amount {bill.amount}; "
                f"bill will be marked PAID"
            )

        payment = Payment.objects.create(
            bill=bill,
            amount=amount,
            payment_method=payment_method,
            payment_date=payment_date,
            status='COMPLETED',
            reference_number=reference_number or None,
            notes=notes or None,
        )

        old_status = bill.status
        if bill.status == Bill.PAID:
            logger.warning(f"Additional payment {payment.pk} recorded against already paid bill {bill.pk}")
            bill.save(update_fields=['updated_by_id', 'updated_from_ip'])
        else:
            bill.transition_to(Bill.PAID, reason=f"Paid by payment {payment.pk}")

        FinancialAuditLog.log_financial_action(
            action='PAYMENT_RECEIVE',
            target_object=payment,
            amount=amount,
            student=bill.student,
            additional_data={
                'bill_id': str(bill.pk),
                'bill_amount': str(bill.amount),
                'bill_status_before': old_status,
                'payment_method': payment_method,
                'reference_number': reference_number or '',
            },
            notes=notes,
        )

        logger.info(f"Recorded payment {payment.pk} of {amount} for bill {bill.pk} ({bill.title})")
        return payment

    @staticmethod
    def get_payment(payment_id):
        return get_or_not_found(
            Payment.objects.select_related('bill__student__student_class', 'bill__student__parent__profile'),
            payment_id, PaymentNotFound, 'Payment'
        )

    @staticmethod
    def get_payment_history_by_parent(parent_id):
        """Every payment made on bills of a parent's children, newest first."""
        return (
            Payment.objects
            .select_related('bill__student')
            .filter(bill__student__parent_id=parent_id)
            .order_by('-payment_date', '-created_at')
        )

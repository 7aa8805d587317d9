"""Bills, payments and the bill status state machine"""

from datetime import date, datetime
from decimal import Decimal
from io import StringIO
import uuid
from unittest import mock

import pytest
from django.core.exceptions import ValidationError
from django.core.management import call_command

from core.exceptions import BillNotFound, StudentNotFound, PaymentNotFound, InvalidBillTransition
from core.utils import get_school_current_time, get_school_timezone
from fees.models import Bill, Payment
from fees.receipts import PaymentReceiptService
from fees.services import BillService, PaymentService
from utils.models import FinancialAuditLog


@pytest.mark.django_db
class TestCreateBill:

    def test_new_bill_is_pending(self, bill, student):
        assert bill.status == Bill.PENDING
        assert bill.amount == Decimal('100.00')
        assert bill.student_id == student.pk
        assert FinancialAuditLog.objects.filter(action='BILL_CREATE', object_id=str(bill.pk)).exists()

    def test_unknown_student(self):
        with pytest.raises(StudentNotFound):
            BillService.create_bill(uuid.uuid4(), 'MONTHLY_FEE', 'Fees', '10.00', date(2024, 1, 31))

    @pytest.mark.parametrize('field, value', [
        ('amount', '0'),
        ('amount', '-10.00'),
        ('bill_type', 'TUITION'),
        ('title', '   '),
        ('amount', '10000000000.00'),
    ])
    def test_invalid_input(self, student, field, value):
        data = {
            'student_id': student.pk,
            'bill_type': 'MONTHLY_FEE',
            'title': 'Fees',
            'amount': '10.00',
            'due_date': date(2024, 1, 31),
        }
        data[field] = value

        with pytest.raises(ValidationError):
            BillService.create_bill(**data)

    def test_active_bills_by_parent_excludes_settled(self, student, parent):
        pending = BillService.create_bill(student.pk, 'ACTIVITY', 'Trip', '20.00', date(2024, 2, 1))
        paid = BillService.create_bill(student.pk, 'BOOK', 'Books', '30.00', date(2024, 1, 15))
        cancelled = BillService.create_bill(student.pk, 'UNIFORM', 'Uniform', '40.00', date(2024, 1, 20))
        PaymentService.create_payment(paid.pk, '30.00', 'CASH', get_school_current_time())
        BillService.cancel_bill(cancelled.pk, 'Duplicate')

        active = list(BillService.get_active_bills_by_parent(parent.pk))

        assert [b.pk for b in active] == [pending.pk]


@pytest.mark.django_db
class TestCreatePayment:

    def test_payment_settles_bill(self, bill):
        payment = PaymentService.create_payment(bill.pk, Decimal('100.00'), 'CASH', get_school_current_time())

        bill.refresh_from_db()
        assert payment.status == 'COMPLETED'
        assert bill.status == Bill.PAID
        assert Payment.objects.filter(bill=bill, status='COMPLETED').count() == 1

    def test_payment_writes_audit_entry(self, bill, student):
        payment = PaymentService.create_payment(bill.pk, '100.00', 'BANK_TRANSFER', get_school_current_time(),
                                                reference_number='TRX-1')

        entry = FinancialAuditLog.objects.get(action='PAYMENT_RECEIVE')
        assert entry.object_id == str(payment.pk)
        assert entry.student_id == str(student.pk)
        assert entry.amount_involved == Decimal('100.00')
        assert entry.additional_data['bill_status_before'] == Bill.PENDING

    def test_amount_mismatch_still_settles(self, bill):
        PaymentService.create_payment(bill.pk, '60.00', 'CASH', get_school_current_time())

        bill.refresh_from_db()
        assert bill.status == Bill.PAID

    def test_overdue_bill_can_be_paid(self, bill):
        BillService.mark_overdue_bills(as_of=date(2024, 2, 1))
        PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())

        bill.refresh_from_db()
        assert bill.status == Bill.PAID

    def test_additional_payment_on_paid_bill(self, bill):
        PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())
        PaymentService.create_payment(bill.pk, '5.00', 'CASH', get_school_current_time())

        bill.refresh_from_db()
        assert bill.status == Bill.PAID
        assert bill.payments.count() == 2

    def test_cancelled_bill_rejects_payment(self, bill):
        BillService.cancel_bill(bill.pk, 'Student left')

        with pytest.raises(InvalidBillTransition):
            PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())
        assert not Payment.objects.filter(bill=bill).exists()

    def test_unknown_bill(self):
        with pytest.raises(BillNotFound):
            PaymentService.create_payment(uuid.uuid4(), '100.00', 'CASH', get_school_current_time())

    @pytest.mark.parametrize('amount, method', [
        ('0', 'CASH'),
        ('-1', 'CASH'),
        ('10.00', 'CHEQUE'),
        ('10000000000.00', 'CASH'),
        ('1000000000000.00', 'CASH'),
    ])
    def test_invalid_input_leaves_bill_pending(self, bill, amount, method):
        with pytest.raises(ValidationError):
            PaymentService.create_payment(bill.pk, amount, method, get_school_current_time())

        bill.refresh_from_db()
        assert bill.status == Bill.PENDING
        assert not Payment.objects.filter(bill=bill).exists()

    def test_date_only_payment_date(self, bill):
        payment = PaymentService.create_payment(bill.pk, '100.00', 'CASH', date(2024, 1, 15))

        assert payment.payment_date == datetime(2024, 1, 15, tzinfo=get_school_timezone())

    def test_largest_column_amount_is_accepted(self, bill):
        payment = PaymentService.create_payment(bill.pk, '9999999999.99', 'BANK_TRANSFER', get_school_current_time())

        payment.refresh_from_db()
        assert payment.amount == Decimal('9999999999.99')

    def test_failure_after_insert_rolls_back_payment_and_status(self, bill):
        with mock.patch.object(FinancialAuditLog, 'log_financial_action', side_effect=RuntimeError('audit store down')):
            with pytest.raises(RuntimeError):
                PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())

        bill.refresh_from_db()
        assert bill.status == Bill.PENDING
        assert not Payment.objects.filter(bill=bill).exists()
        assert not FinancialAuditLog.objects.filter(action='PAYMENT_RECEIVE').exists()

    def test_payment_history_by_parent(self, bill, parent, other_parent):
        payment = PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())

        assert [p.pk for p in PaymentService.get_payment_history_by_parent(parent.pk)] == [payment.pk]
        assert not PaymentService.get_payment_history_by_parent(other_parent.pk).exists()


@pytest.mark.django_db
class TestBillStatus:

    def test_transition_map(self, bill):
        assert bill.can_transition_to(Bill.PAID)
        assert bill.can_transition_to(Bill.OVERDUE)
        assert bill.can_transition_to(Bill.CANCELLED)
        assert not bill.can_transition_to(Bill.PENDING)

    def test_terminal_status_cannot_change(self, bill):
        bill.transition_to(Bill.PAID)

        with pytest.raises(InvalidBillTransition):
            bill.transition_to(Bill.CANCELLED)

    def test_cancel_requires_reason(self, bill):
        with pytest.raises(ValidationError):
            BillService.cancel_bill(bill.pk, '')

    def test_cancel_paid_bill_is_rejected(self, bill):
        PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())

        with pytest.raises(InvalidBillTransition):
            BillService.cancel_bill(bill.pk, 'Mistake')

    def test_cancel_records_reason(self, bill):
        cancelled = BillService.cancel_bill(bill.pk, 'Duplicate bill')

        assert cancelled.status == Bill.CANCELLED
        assert 'Duplicate bill' in cancelled.change_reason

    def test_mark_overdue_only_touches_past_due_pending(self, student, bill):
        future = BillService.create_bill(student.pk, 'ACTIVITY', 'Trip', '20.00', date(2024, 3, 1))

        assert BillService.mark_overdue_bills(as_of=date(2024, 2, 1)) == 1

        bill.refresh_from_db()
        future.refresh_from_db()
        assert bill.status == Bill.OVERDUE
        assert future.status == Bill.PENDING

    def test_mark_overdue_command(self, bill):
        out = StringIO()
        call_command('mark_overdue_bills', '--as-of', '2024-02-01', stdout=out)

        bill.refresh_from_db()
        assert bill.status == Bill.OVERDUE
        assert 'Marked 1 bill(s) as overdue' in out.getvalue()


@pytest.mark.django_db
class TestReceipts:

    def test_receipt_is_pdf_and_url_recorded(self, bill):
        payment = PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())

        content = PaymentReceiptService.generate_receipt(payment.pk)

        payment.refresh_from_db()
        assert content.startswith(b'%PDF')
        assert payment.receipt_url.endswith(f'/payments/{payment.pk}/receipt/')

    def test_receipt_data(self, bill, student, parent, school_class):
        payment = PaymentService.create_payment(bill.pk, '100.00', 'CASH', get_school_current_time())

        data = PaymentReceiptService.get_receipt_data(PaymentService.get_payment(payment.pk))

        assert data['student_name'] == student.full_name
        assert data['parent_email'] == parent.email
        assert data['class_name'] == school_class.name
        assert data['payment_amount'] == Decimal('100.00')

    def test_unknown_payment(self):
        with pytest.raises(PaymentNotFound):
            PaymentReceiptService.generate_receipt(uuid.uuid4())

"""Savings ledger: balance derivation, overdraft rejection, ordering, immutability and concurrent appends"""

from datetime import date, datetime
from decimal import Decimal
from io import StringIO
import threading
import uuid
from unittest import mock

import pytest
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, connection

from core.exceptions import StudentNotFound, InsufficientFunds, ImmutableRecordError, LedgerConflict
from core.utils import get_school_timezone, start_of_day
from savings.models import SavingsTransaction
from savings.services import SavingsLedgerService, MAX_APPEND_ATTEMPTS, is_sequence_collision
from students.services import StudentService
from utils.models import FinancialAuditLog

DEPOSIT = SavingsTransaction.DEPOSIT
WITHDRAWAL = SavingsTransaction.WITHDRAWAL


def school_dt(*args):
    return datetime(*args, tzinfo=get_school_timezone())


def record(student, transaction_type, amount, when=None, description=None):
    return SavingsLedgerService.record_transaction(
        student.pk, transaction_type, amount, when or school_dt(2024, 1, 10, 9, 0), description
    )


@pytest.mark.django_db
class TestBalanceDerivation:

    def test_deposits_and_withdrawal_give_expected_balance(self, student):
        first = record(student, DEPOSIT, '50.00')
        second = record(student, DEPOSIT, '25.00')
        third = record(student, WITHDRAWAL, '20.00')

        assert [first.balance_after, second.balance_after, third.balance_after] == [
            Decimal('50.00'), Decimal('75.00'), Decimal('55.00')
        ]
        assert [first.sequence, second.sequence, third.sequence] == [1, 2, 3]
        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('55.00')

    def test_overdraft_is_rejected_and_ledger_unchanged(self, student):
        record(student, DEPOSIT, '50.00')
        record(student, DEPOSIT, '25.00')
        record(student, WITHDRAWAL, '20.00')

        with pytest.raises(InsufficientFunds) as excinfo:
            record(student, WITHDRAWAL, '100.00')

        assert excinfo.value.balance == Decimal('55.00')
        assert excinfo.value.requested == Decimal('100.00')
        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('55.00')
        assert SavingsTransaction.objects.for_student(student.pk).count() == 3

    def test_withdrawal_of_entire_balance_is_allowed(self, student):
        record(student, DEPOSIT, '40.00')
        entry = record(student, WITHDRAWAL, '40.00')

        assert entry.balance_after == Decimal('0.00')

    def test_first_withdrawal_on_empty_ledger_is_rejected(self, student):
        with pytest.raises(InsufficientFunds):
            record(student, WITHDRAWAL, '0.01')
        assert not SavingsTransaction.objects.for_student(student.pk).exists()

    def test_balances_are_per_student(self, student, other_student):
        record(student, DEPOSIT, '10.00')
        record(other_student, DEPOSIT, '99.00')

        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('10.00')
        assert SavingsLedgerService.get_current_balance(other_student.pk) == Decimal('99.00')

    def test_balance_follows_recording_order_not_transaction_date(self, student):
        record(student, DEPOSIT, '30.00', when=school_dt(2024, 3, 1, 8, 0))
        # Back-dated entry recorded later
        back_dated = record(student, WITHDRAWAL, '10.00', when=school_dt(2024, 1, 1, 8, 0))

        assert back_dated.sequence == 2
        assert back_dated.balance_after == Decimal('20.00')
        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('20.00')


@pytest.mark.django_db
class TestInputValidation:

    def test_unknown_student(self):
        with pytest.raises(StudentNotFound):
            SavingsLedgerService.record_transaction(uuid.uuid4(), DEPOSIT, '10.00', school_dt(2024, 1, 1))

    @pytest.mark.parametrize('amount', ['0', '-5.00', 'abc', 'NaN', '10000000000.00', '99999999999999.99'])
    def test_non_positive_or_malformed_amount(self, student, amount):
        with pytest.raises(ValidationError):
            record(student, DEPOSIT, amount)

    def test_unknown_transaction_type(self, student):
        with pytest.raises(ValidationError):
            record(student, 'INTEREST', '10.00')

    def test_date_is_stored_as_start_of_school_day(self, student):
        entry = SavingsLedgerService.record_transaction(student.pk, DEPOSIT, '5.00', date(2024, 2, 14))

        assert entry.transaction_date == start_of_day(date(2024, 2, 14))

    def test_amount_is_quantized(self, student):
        entry = record(student, DEPOSIT, '12.5')
        assert entry.amount == Decimal('12.50')

    def test_rejected_oversized_amount_leaves_balance_readable(self, student):
        record(student, DEPOSIT, '50.00')

        with pytest.raises(ValidationError):
            record(student, DEPOSIT, '99999999999999.99')

        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('50.00')
        assert SavingsTransaction.objects.for_student(student.pk).count() == 1

    def test_deposit_cannot_overflow_stored_balance(self, student):
        SavingsTransaction.objects.create(
            student=student,
            transaction_type=DEPOSIT,
            amount=Decimal('9999999999.99'),
            balance_after=Decimal('999999999999.00'),
            sequence=1,
            transaction_date=school_dt(2024, 1, 9),
        )

        record(student, DEPOSIT, '0.99')
        with pytest.raises(ValidationError):
            record(student, DEPOSIT, '0.01')

        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('999999999999.99')


@pytest.mark.django_db
class TestReads:

    def test_balance_for_unknown_or_malformed_student_is_zero(self):
        assert SavingsLedgerService.get_current_balance(uuid.uuid4()) == Decimal('0.00')
        assert SavingsLedgerService.get_current_balance('not-a-uuid') == Decimal('0.00')

    def test_list_is_newest_transaction_date_first(self, student):
        march = record(student, DEPOSIT, '30.00', when=school_dt(2024, 3, 1, 8, 0))
        january = record(student, DEPOSIT, '10.00', when=school_dt(2024, 1, 1, 8, 0))
        june = record(student, WITHDRAWAL, '5.00', when=school_dt(2024, 6, 1, 8, 0))

        listed = SavingsLedgerService.list_transactions(student.pk)

        assert [t.pk for t in listed] == [june.pk, march.pk, january.pk]

    def test_same_date_entries_list_latest_recorded_first(self, student):
        when = school_dt(2024, 1, 5, 12, 0)
        first = record(student, DEPOSIT, '1.00', when=when)
        second = record(student, DEPOSIT, '2.00', when=when)

        listed = SavingsLedgerService.list_transactions(student.pk)

        assert [t.pk for t in listed] == [second.pk, first.pk]

    def test_list_for_unknown_student_is_empty(self):
        assert SavingsLedgerService.list_transactions(uuid.uuid4()) == []

    def test_summary_totals(self, student):
        record(student, DEPOSIT, '50.00')
        record(student, DEPOSIT, '25.00')
        record(student, WITHDRAWAL, '20.00')

        summary = SavingsLedgerService.get_savings_summary(student.pk)

        assert summary['balance'] == Decimal('55.00')
        assert summary['total_deposits'] == Decimal('75.00')
        assert summary['total_withdrawals'] == Decimal('20.00')
        assert summary['transaction_count'] == 3


@pytest.mark.django_db
class TestImmutability:

    def test_existing_entry_cannot_be_saved(self, student):
        entry = record(student, DEPOSIT, '10.00')
        entry.amount = Decimal('1000.00')

        with pytest.raises(ImmutableRecordError):
            entry.save()

    def test_entry_cannot_be_deleted(self, student):
        entry = record(student, DEPOSIT, '10.00')

        with pytest.raises(ImmutableRecordError):
            entry.delete()

    def test_bulk_update_and_delete_are_refused(self, student):
        record(student, DEPOSIT, '10.00')
        queryset = SavingsTransaction.objects.for_student(student.pk)

        with pytest.raises(ImmutableRecordError):
            queryset.update(amount=Decimal('1.00'))
        with pytest.raises(ImmutableRecordError):
            queryset.delete()
        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('10.00')


@pytest.mark.django_db
class TestVerifyLedger:

    def test_consistent_ledger_has_no_problems(self, student):
        record(student, DEPOSIT, '50.00')
        record(student, WITHDRAWAL, '20.00')

        assert SavingsLedgerService.verify_ledger(student.pk) == []

    def test_detects_balance_mismatch(self, student):
        record(student, DEPOSIT, '50.00')
        SavingsTransaction.objects.create(
            student=student,
            transaction_type=DEPOSIT,
            amount=Decimal('10.00'),
            balance_after=Decimal('999.00'),
            sequence=2,
            transaction_date=school_dt(2024, 1, 11),
        )

        problems = SavingsLedgerService.verify_ledger(student.pk)

        assert len(problems) == 1
        assert problems[0]['sequence'] == 2
        assert problems[0]['expected_balance'] == Decimal('60.00')
        assert problems[0]['problem'] == 'balance mismatch'


@pytest.mark.django_db
def test_each_entry_writes_an_audit_record(student):
    record(student, DEPOSIT, '50.00')
    record(student, WITHDRAWAL, '20.00')

    actions = list(
        FinancialAuditLog.objects.filter(student_id=str(student.pk)).order_by('id')
        .values_list('action', flat=True)
    )
    assert actions == ['SAVINGS_DEPOSIT', 'SAVINGS_WITHDRAWAL']


@pytest.mark.django_db
class TestVerifyLedgerCommand:

    def test_consistent_ledgers(self, student, other_student):
        record(student, DEPOSIT, '10.00')
        record(other_student, DEPOSIT, '20.00')
        out = StringIO()

        call_command('verify_savings_ledger', stdout=out)

        assert 'Checked 2 savings ledger(s): all consistent' in out.getvalue()

    def test_inconsistent_ledger_fails(self, student):
        record(student, DEPOSIT, '10.00')
        SavingsTransaction.objects.create(
            student=student,
            transaction_type=DEPOSIT,
            amount=Decimal('10.00'),
            balance_after=Decimal('50.00'),
            sequence=2,
            transaction_date=school_dt(2024, 1, 11),
        )

        with pytest.raises(CommandError):
            call_command('verify_savings_ledger', '--student', str(student.pk), stdout=StringIO())

    def test_unknown_student(self, db):
        with pytest.raises(CommandError):
            call_command('verify_savings_ledger', '--student', str(uuid.uuid4()), stdout=StringIO())


SQLITE_COLLISION = (
    'UNIQUE constraint failed: savings_savingstransaction.student_id, savings_savingstransaction.sequence'
)
POSTGRES_COLLISION = (
    'duplicate key value violates unique constraint "savings_student_sequence_unique"'
)


@pytest.mark.django_db
class TestAppendRetry:

    @pytest.mark.parametrize('message', [SQLITE_COLLISION, POSTGRES_COLLISION])
    def test_repeated_sequence_collisions_raise_ledger_conflict(self, student, message):
        record(student, DEPOSIT, '50.00')

        with mock.patch.object(
            SavingsTransaction.objects, 'create', side_effect=IntegrityError(message)
        ) as create:
            with pytest.raises(LedgerConflict):
                record(student, WITHDRAWAL, '10.00')

        assert create.call_count == MAX_APPEND_ATTEMPTS
        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('50.00')

    def test_collision_then_success_is_recorded_once(self, student):
        record(student, DEPOSIT, '50.00')
        real_create = SavingsTransaction.objects.create
        calls = []

        def collide_once(**kwargs):
            calls.append(kwargs['sequence'])
            if len(calls) == 1:
                raise IntegrityError(SQLITE_COLLISION)
            return real_create(**kwargs)

        with mock.patch.object(SavingsTransaction.objects, 'create', side_effect=collide_once):
            entry = record(student, WITHDRAWAL, '10.00')

        assert calls == [2, 2]
        assert entry.balance_after == Decimal('40.00')
        assert SavingsTransaction.objects.for_student(student.pk).count() == 2

    def test_other_integrity_errors_are_not_retried(self, student):
        record(student, DEPOSIT, '50.00')
        error = IntegrityError('CHECK constraint failed: savings_balance_non_negative')

        with mock.patch.object(SavingsTransaction.objects, 'create', side_effect=error) as create:
            with pytest.raises(IntegrityError):
                record(student, WITHDRAWAL, '10.00')

        assert create.call_count == 1

    @pytest.mark.parametrize('message, expected', [
        (SQLITE_COLLISION, True),
        (POSTGRES_COLLISION, True),
        ('CHECK constraint failed: savings_amount_positive', False),
        ('UNIQUE constraint failed: students_student.admission_number', False),
        ('FOREIGN KEY constraint failed', False),
    ])
    def test_is_sequence_collision(self, message, expected):
        assert is_sequence_collision(IntegrityError(message)) is expected


def run_concurrently(count, work):
    """Run ``work(index)`` on ``count`` threads released together; return results or raised exceptions."""
    barrier = threading.Barrier(count)
    results = [None] * count

    def worker(index):
        try:
            barrier.wait()
            results[index] = work(index)
        except Exception as e:
            results[index] = e
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return results


@pytest.mark.django_db(transaction=True)
class TestConcurrentAppends:
    THREADS = 8

    def test_different_students_all_succeed(self, parent, school_class):
        students = [
            StudentService.create_student(
                admission_number=f'ADM-2{index:02d}',
                full_name=f'Saver {index}',
                date_of_birth=date(2015, 1, 1),
                parent_id=parent.pk,
                class_id=school_class.pk,
                enrollment_date=date(2022, 2, 1),
            )
            for index in range(self.THREADS)
        ]
        for saver in students:
            record(saver, DEPOSIT, '100.00')

        results = run_concurrently(self.THREADS, lambda index: record(students[index], WITHDRAWAL, '60.00'))

        assert all(isinstance(result, SavingsTransaction) for result in results), results
        for saver in students:
            assert SavingsLedgerService.get_current_balance(saver.pk) == Decimal('40.00')
            assert SavingsLedgerService.verify_ledger(saver.pk) == []

    def test_same_student_withdrawals_serialize(self, student):
        record(student, DEPOSIT, '100.00')

        results = run_concurrently(self.THREADS, lambda index: record(student, WITHDRAWAL, '60.00'))

        succeeded = [result for result in results if isinstance(result, SavingsTransaction)]
        refused = [result for result in results if isinstance(result, InsufficientFunds)]
        assert len(succeeded) == 1, results
        assert len(refused) == self.THREADS - 1, results
        assert succeeded[0].balance_after == Decimal('40.00')
        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('40.00')
        assert SavingsLedgerService.verify_ledger(student.pk) == []

    def test_concurrent_deposits_get_consecutive_sequences(self, student):
        results = run_concurrently(self.THREADS, lambda index: record(student, DEPOSIT, '10.00'))

        assert all(isinstance(result, SavingsTransaction) for result in results), results
        assert sorted(result.sequence for result in results) == list(range(1, self.THREADS + 1))
        assert SavingsLedgerService.get_current_balance(student.pk) == Decimal('80.00')

# savings/management/commands/verify_savings_ledger.py

from django.core.management.base import BaseCommand, CommandError

from core.exceptions import StudentNotFound
from core.utils import get_or_not_found
from savings.models import SavingsTransaction
from savings.services import SavingsLedgerService
from students.models import Student


class Command(BaseCommand):
    help = 'Re-derive savings balances from the ledger and report inconsistent rows'

    def add_arguments(self, parser):
        parser.add_argument('--student', dest='student', help='Only check this student (UUID)')

    def handle(self, *args, **options):
        if options.get('student'):
            try:
                student = get_or_not_found(Student.objects, options['student'], StudentNotFound, 'Student')
            except StudentNotFound as e:
                raise CommandError(str(e))
            student_ids = [student.pk]
        else:
            student_ids = (
                SavingsTransaction.objects
                .values_list('student_id', flat=True)
                .order_by('student_id')
                .distinct()
            )

        checked = 0
        failures = 0
        for student_id in student_ids:
            checked += 1
            problems = SavingsLedgerService.verify_ledger(student_id)
            if not problems:
                continue
            failures += 1
            self.stdout.write(self.style.ERROR(f'Student {student_id}: {len(problems)} inconsistent row(s)'))
            for problem in problems:
                self.stdout.write(
                    f"  #{problem['sequence']} {problem['problem']}: "
                    f"stored {problem['stored_balance']}, expected {problem['expected_balance']}"
                )

        if failures:
            raise CommandError(f'{failures} of {checked} savings ledger(s) are inconsistent')

        self.stdout.write(self.style.SUCCESS(f'Checked {checked} savings ledger(s): all consistent'))

# fees/management/commands/mark_overdue_bills.py

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from fees.services import BillService


class Command(BaseCommand):
    help = 'Mark pending bills whose due date has passed as overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--as-of',
            dest='as_of',
            help='Reference date (YYYY-MM-DD). Defaults to today in school time.',
        )

    def handle(self, *args, **options):
        as_of = None
        if options.get('as_of'):
            try:
                as_of = date.fromisoformat(options['as_of'])
            except ValueError:
                raise CommandError(f"Invalid --as-of date: {options['as_of']}")

        count = BillService.mark_overdue_bills(as_of=as_of)

        if count:
            self.stdout.write(self.style.WARNING(f'Marked {count} bill(s) as overdue'))
        else:
            self.stdout.write(self.style.SUCCESS('No pending bills are past due'))

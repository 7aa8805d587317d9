"""PDF and Excel export of the financial report"""

from datetime import date
from decimal import Decimal
from io import BytesIO

import pytest
from django.core.exceptions import ValidationError
from openpyxl import load_workbook

from core.utils import get_school_today
from fees.services import PaymentService
from finance.exporters import export_financial_report
from finance.reports import FinancialReportFilters
from finance.services import ExpenseService
from utils.models import FinancialAuditLog


@pytest.fixture
def report_data(bill, admin_user):
    today = get_school_today()
    PaymentService.create_payment(bill.pk, '100.00', 'CASH', today)
    ExpenseService.create_expense('MAINTENANCE', 'Roof repair', '40.00', today, admin_user)


@pytest.mark.django_db
class TestExportFinancialReport:

    def test_pdf(self, report_data):
        exported = export_financial_report(FinancialReportFilters(), 'pdf')

        assert exported.content.startswith(b'%PDF')
        assert exported.content_type == 'application/pdf'
        assert exported.filename.startswith('financial_report_')
        assert exported.filename.endswith('.pdf')

    def test_excel(self, report_data):
        exported = export_financial_report(FinancialReportFilters(), 'excel')

        workbook = load_workbook(BytesIO(exported.content))
        assert workbook.sheetnames == ['Summary', 'Bills', 'Payments', 'Savings', 'Other Income', 'Expenses']
        assert exported.filename.endswith('.xlsx')

        summary = {row[0]: row[1] for row in workbook['Summary'].iter_rows(min_row=4, values_only=True)}
        assert Decimal(str(summary['Student Payments'])) == Decimal('100.00')
        assert Decimal(str(summary['Net Income'])) == Decimal('60.00')

        payments = list(workbook['Payments'].iter_rows(min_row=2, values_only=True))
        assert len(payments) == 1
        assert payments[0][1] == 'January fees'

    def test_empty_report_still_renders(self, db):
        exported = export_financial_report(
            FinancialReportFilters(start_date=date(2020, 1, 1), end_date=date(2020, 1, 31)), 'pdf'
        )

        assert exported.content.startswith(b'%PDF')

    def test_export_is_audited(self, report_data):
        export_financial_report(FinancialReportFilters(), 'excel')

        entry = FinancialAuditLog.objects.get(action='FINANCIAL_DATA_EXPORT')
        assert entry.additional_data['format'] == 'excel'
        assert entry.amount_involved == Decimal('60.00')

    def test_unknown_format(self, db):
        with pytest.raises(ValidationError):
            export_financial_report(FinancialReportFilters(), 'csv')
        assert not FinancialAuditLog.objects.filter(action='FINANCIAL_DATA_EXPORT').exists()

# finance/exporters.py

"""
Financial report export to PDF (reportlab) and Excel (openpyxl).

Both renderers work from finance.reports.collect_report_data(); the layout
is one summary block followed by one table per record kind.
"""

from dataclasses import dataclass
from io import BytesIO
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from django.core.exceptions import ValidationError

from finance.reports import FinancialReportFilters, collect_report_data
from core.utils import format_money, get_school_current_time, localize_datetime
from utils.models import FinancialAuditLog

logger = logging.getLogger(__name__)

PDF = 'pdf'
EXCEL = 'excel'

EXPORT_FORMAT_CHOICES = [
    (PDF, 'PDF'),
    (EXCEL, 'Excel'),
]

CONTENT_TYPES = {
    PDF: 'application/pdf',
    EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}

EXTENSIONS = {PDF: 'pdf', EXCEL: 'xlsx'}

SUMMARY_LABELS = [
    ('total_bill_amount', 'Total Billed'),
    ('total_payment_amount', 'Student Payments'),
    ('total_other_income', 'Other Income'),
    ('total_expenses', 'Expenses'),
    ('net_income', 'Net Income'),
    ('total_savings_deposits', 'Savings Deposits'),
    ('total_savings_withdrawals', 'Savings Withdrawals'),
]


@dataclass(frozen=True)
class ExportedReport:
    content: bytes
    filename: str
    content_type: str


# =============================================================================
# TABLE LAYOUTS
# =============================================================================

def _fmt_date(value):
    if value is None:
        return ''
    if hasattr(value, 'hour'):
        return localize_datetime(value).strftime('%Y-%m-%d %H:%M')
    return value.strftime('%Y-%m-%d')


def _sections(data):
    """(title, headers, rows) for every detail table, amounts left as Decimal."""
    return [
        (
            'Bills',
            ['Student', 'Class', 'Type', 'Title', 'Amount', 'Due Date', 'Status'],
            [
                [r['student_name'], r['class_name'], r['bill_type'], r['title'],
                 r['amount'], _fmt_date(r['due_date']), r['status']]
                for r in data['bills']
            ],
        ),
        (
            'Payments',
            ['Student', 'Bill', 'Amount', 'Method', 'Date', 'Status', 'Reference'],
            [
                [r['student_name'], r['bill_title'], r['amount'], r['payment_method'],
                 _fmt_date(r['payment_date']), r['status'], r['reference_number'] or '']
                for r in data['payments']
            ],
        ),
        (
            'Savings',
            ['Student', 'Type', 'Amount', 'Balance After', 'Date', 'Description'],
            [
                [r['student_name'], r['transaction_type'], r['amount'], r['balance_after'],
                 _fmt_date(r['transaction_date']), r['description'] or '']
                for r in data['savings']
            ],
        ),
        (
            'Other Income',
            ['Category', 'Title', 'Amount', 'Date', 'Description'],
            [
                [r['category'], r['title'], r['amount'], _fmt_date(r['income_date']), r['description'] or '']
                for r in data['other_incomes']
            ],
        ),
        (
            'Expenses',
            ['Category', 'Title', 'Amount', 'Date', 'Description'],
            [
                [r['category'], r['title'], r['amount'], _fmt_date(r['expense_date']), r['description'] or '']
                for r in data['expenses']
            ],
        ),
    ]


def _period_label(filters):
    return f"{_fmt_date(filters.period_start)} to {_fmt_date(filters.period_end)}"


# =============================================================================
# RENDERERS
# =============================================================================

def render_pdf(data):
    """Render collected report data as PDF bytes."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), title='Financial Report')
    elements = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.HexColor('#1a1a1a'),
        spaceAfter=12,
        alignment=TA_CENTER
    )

    elements.append(Paragraph('Financial Report', title_style))
    elements.append(Paragraph(f"Period: {_period_label(data['filters'])}", styles['Normal']))
    elements.append(Spacer(1, 16))

    summary_rows = [[label, format_money(data['summary'][key])] for key, label in SUMMARY_LABELS]
    summary_table = Table(summary_rows)
    summary_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (0, -1), colors.whitesmoke),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 1, colors.black)
    ]))
    elements.append(summary_table)

    for title, headers, rows in _sections(data):
        elements.append(Spacer(1, 20))
        elements.append(Paragraph(title, styles['Heading2']))
        if not rows:
            elements.append(Paragraph('No records for this period.', styles['Italic']))
            continue

        body = [
            [format_money(cell, include_symbol=False) if not isinstance(cell, str) else cell[:40] for cell in row]
            for row in rows
        ]
        table = Table([headers] + body, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
            ('GRID', (0, 0), (-1, -1), 1, colors.black)
        ]))
        elements.append(table)

    elements.append(Spacer(1, 20))
    elements.append(Paragraph(
        f"Generated {get_school_current_time().strftime('%d %b %Y %H:%M')}",
        styles['Italic']
    ))

    doc.build(elements)
    return buffer.getvalue()


def render_excel(data):
    """Render collected report data as an .xlsx workbook (one sheet per section)."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Summary"

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')

    ws.append(['Financial Report'])
    ws['A1'].font = Font(bold=True, size=14)
    ws.append(['Period', _period_label(data['filters'])])
    ws.append([])
    for key, label in SUMMARY_LABELS:
        ws.append([label, data['summary'][key]])
        ws.cell(row=ws.max_row, column=2).number_format = '#,##0.00'
    ws.column_dimensions['A'].width = 24
    ws.column_dimensions['B'].width = 36

    for title, headers, rows in _sections(data):
        sheet = wb.create_sheet(title=title)
        sheet.append(headers)
        for cell in sheet[1]:
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal='center')
        for row in rows:
            sheet.append(row)
        for column_cells in sheet.columns:
            width = max(len(str(cell.value or '')) for cell in column_cells)
            sheet.column_dimensions[column_cells[0].column_letter].width = min(width + 2, 50)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


RENDERERS = {PDF: render_pdf, EXCEL: render_excel}


# =============================================================================
# EXPORT ENTRY POINT
# =============================================================================

def export_financial_report(filters, export_format):
    """
    Export the financial report for ``filters`` as a downloadable file.

    Args:
        filters (FinancialReportFilters | None)
        export_format (str): 'pdf' or 'excel'

    Returns:
        ExportedReport

    Raises:
        ValidationError: unknown export format

    Example:
        >>> report = export_financial_report(FinancialReportFilters(), 'excel')
        >>> report.filename
        'financial_report_20240131.xlsx'
    """
    if export_format not in RENDERERS:
        raise ValidationError({'export_format': f"Unsupported export format '{export_format}'."})

    filters = (filters or FinancialReportFilters()).resolved()
    data = collect_report_data(filters)
    content = RENDERERS[export_format](data)

    filename = f"financial_report_{get_school_current_time().strftime('%Y%m%d')}.{EXTENSIONS[export_format]}"

    FinancialAuditLog.log_financial_action(
        action='FINANCIAL_DATA_EXPORT',
        amount=data['summary']['net_income'],
        additional_data={
            'format': export_format,
            'filename': filename,
            'period_start': filters.period_start.isoformat(),
            'period_end': filters.period_end.isoformat(),
            'student_id': str(filters.student_id) if filters.student_id else None,
            'class_id': str(filters.class_id) if filters.class_id else None,
            'payment_status': filters.payment_status,
            'bill_type': filters.bill_type,
        },
    )

    logger.info(f"Exported financial report as {export_format} ({len(content)} bytes)")
    return ExportedReport(content=content, filename=filename, content_type=CONTENT_TYPES[export_format])

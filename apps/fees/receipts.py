# fees/receipts.py

"""
PDF payment receipts.

Receipts are rendered on demand from the payment, bill, student, parent and
class records; nothing is stored except the receipt URL on the payment.
"""

from io import BytesIO
import logging

from django.urls import reverse
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from fees.services import PaymentService
from core.utils import format_money, localize_datetime, get_school_current_time

logger = logging.getLogger(__name__)


class PaymentReceiptService:
    """Render payment receipts"""

    @staticmethod
    def get_receipt_data(payment):
        """Flat dict of everything printed on a receipt."""
        bill = payment.bill
        student = bill.student
        return {
            'payment_id': str(payment.pk),
            'payment_amount': payment.amount,
            'payment_method': payment.get_payment_method_display(),
            'payment_date': localize_datetime(payment.payment_date),
            'payment_status': payment.get_status_display(),
            'reference_number': payment.reference_number or '',
            'notes': payment.notes or '',
            'bill_id': str(bill.pk),
            'bill_title': bill.title,
            'bill_description': bill.description or '',
            'bill_amount': bill.amount,
            'bill_type': bill.get_bill_type_display(),
            'due_date': bill.due_date,
            'admission_number': student.admission_number,
            'student_name': student.full_name,
            'parent_name': student.parent_name,
            'parent_email': student.parent.email,
            'class_name': student.student_class.name,
            'class_monthly_fee': student.student_class.monthly_fee,
        }

    @staticmethod
    def generate_receipt(payment_id):
        """
        Render the receipt for a payment as PDF bytes.

        Also records the receipt download URL on the payment the first time
        a receipt is produced.

        Raises:
            PaymentNotFound: no such payment
        """
        payment = PaymentService.get_payment(payment_id)
        data = PaymentReceiptService.get_receipt_data(payment)

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=A4,
            topMargin=0.75 * inch, bottomMargin=0.75 * inch,
            title=f"Receipt {data['payment_id']}",
        )
        elements = []

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            'ReceiptTitle',
            parent=styles['Heading1'],
            fontSize=20,
            textColor=colors.HexColor('#1a1a1a'),
            spaceAfter=12,
            alignment=TA_CENTER
        )

        elements.append(Paragraph('Payment Receipt', title_style))
        elements.append(Paragraph(f"Receipt No. {data['payment_id']}", styles['Normal']))
        elements.append(Spacer(1, 20))

        rows = [
            ['Student', f"{data['student_name']} ({data['admission_number']})"],
            ['Class', data['class_name']],
            ['Parent', f"{data['parent_name']} <{data['parent_email']}>"],
            ['Bill', f"{data['bill_title']} ({data['bill_type']})"],
            ['Bill Amount', format_money(data['bill_amount'])],
            ['Due Date', data['due_date'].strftime('%d %b %Y')],
            ['Amount Paid', format_money(data['payment_amount'])],
            ['Payment Method', data['payment_method']],
            ['Payment Date', data['payment_date'].strftime('%d %b %Y %H:%M')],
            ['Status', data['payment_status']],
            ['Reference', data['reference_number'] or '-'],
        ]
        if data['notes']:
            rows.append(['Notes', data['notes'][:200]])

        table = Table(rows, colWidths=[2 * inch, 4.5 * inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#4472C4')),
            ('TEXTCOLOR', (0, 0), (0, -1), colors.whitesmoke),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 1, colors.black)
        ]))
        elements.append(table)
        elements.append(Spacer(1, 20))
        elements.append(Paragraph(
            f"Generated {get_school_current_time().strftime('%d %b %Y %H:%M')}",
            styles['Italic']
        ))

        doc.build(elements)
        content = buffer.getvalue()

        if not payment.receipt_url:
            payment.receipt_url = reverse('fees:payment_receipt', args=[payment.pk])
            payment.save(update_fields=['receipt_url', 'updated_by_id', 'updated_from_ip'])

        logger.info(f"Generated receipt for payment {payment.pk} ({len(content)} bytes)")
        return content

# fees/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from django.http import JsonResponse, HttpResponse
import logging

from core.utils import json_endpoint, json_error, parse_json_body, form_errors
from .forms import BillForm, CancelBillForm, PaymentForm
from .receipts import PaymentReceiptService
from .services import BillService, PaymentService

logger = logging.getLogger(__name__)


def serialize_bill(bill):
    return {
        'id': str(bill.id),
        'student_id': str(bill.student_id),
        'student_name': bill.student.full_name,
        'bill_type': bill.bill_type,
        'title': bill.title,
        'description': bill.description,
        'amount': bill.amount,
        'due_date': bill.due_date,
        'status': bill.status,
        'created_at': bill.created_at,
        'updated_at': bill.updated_at,
    }


def serialize_payment(payment):
    return {
        'id': str(payment.id),
        'bill_id': str(payment.bill_id),
        'amount': payment.amount,
        'payment_method': payment.payment_method,
        'payment_date': payment.payment_date,
        'status': payment.status,
        'reference_number': payment.reference_number,
        'notes': payment.notes,
        'receipt_url': payment.receipt_url,
        'created_at': payment.created_at,
        'updated_at': payment.updated_at,
    }


# =============================================================================
# BILLS
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def create_bill(request):
    form = BillForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    bill = BillService.create_bill(**form.cleaned_data)
    return JsonResponse(
        {"success": True, "message": "Bill created successfully", "bill": serialize_bill(bill)},
        status=201
    )


@login_required
@require_GET
@json_endpoint
def bills_by_student(request, student_id):
    bills = [serialize_bill(b) for b in BillService.get_bills_by_student(student_id)]
    return JsonResponse({"success": True, "count": len(bills), "bills": bills})


@login_required
@require_GET
@json_endpoint
def active_bills_by_parent(request, parent_id):
    """
    AJAX view listing the unpaid (pending or overdue) bills of a parent's children
    """
    bills = [serialize_bill(b) for b in BillService.get_active_bills_by_parent(parent_id)]
    return JsonResponse({"success": True, "count": len(bills), "bills": bills})


@csrf_exempt
@login_required
@require_POST
@json_endpoint
def cancel_bill(request, bill_id):
    form = CancelBillForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    bill = BillService.cancel_bill(bill_id, form.cleaned_data['reason'])
    return JsonResponse({"success": True, "message": "Bill cancelled", "bill": serialize_bill(bill)})


# =============================================================================
# PAYMENTS
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def create_payment(request):
    """
    AJAX endpoint recording a payment; the bill is marked PAID
    """
    form = PaymentForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    payment = PaymentService.create_payment(**form.cleaned_data)
    return JsonResponse(
        {"success": True, "message": "Payment recorded successfully", "payment": serialize_payment(payment)},
        status=201
    )


@login_required
@require_GET
@json_endpoint
def payment_history_by_parent(request, parent_id):
    payments = [serialize_payment(p) for p in PaymentService.get_payment_history_by_parent(parent_id)]
    return JsonResponse({"success": True, "count": len(payments), "payments": payments})


@login_required
@require_GET
@json_endpoint
def payment_receipt(request, payment_id):
    """Download the PDF receipt for a payment"""
    content = PaymentReceiptService.generate_receipt(payment_id)
    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="receipt_{payment_id}.pdf"'
    return response

# savings/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from django.http import JsonResponse
import logging

from core.utils import json_endpoint, json_error, parse_json_body, form_errors
from .forms import SavingsTransactionForm
from .services import SavingsLedgerService

logger = logging.getLogger(__name__)


def serialize_transaction(entry):
    return {
        'id': str(entry.id),
        'student_id': str(entry.student_id),
        'transaction_type': entry.transaction_type,
        'amount': entry.amount,
        'balance_after': entry.balance_after,
        'sequence': entry.sequence,
        'description': entry.description,
        'transaction_date': entry.transaction_date,
        'created_at': entry.created_at,
    }


# =============================================================================
# SAVINGS LEDGER
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def record_transaction(request):
    """
    AJAX endpoint recording a savings deposit or withdrawal.
    Withdrawals beyond the balance are rejected with 409.
    """
    form = SavingsTransactionForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    entry = SavingsLedgerService.record_transaction(**form.cleaned_data)
    return JsonResponse(
        {"success": True, "message": "Savings transaction recorded", "transaction": serialize_transaction(entry)},
        status=201
    )


@login_required
@require_GET
@json_endpoint
def student_balance(request, student_id):
    summary = SavingsLedgerService.get_savings_summary(student_id)
    return JsonResponse({"success": True, "student_id": str(student_id), **summary})


@login_required
@require_GET
@json_endpoint
def student_transactions(request, student_id):
    transactions = [serialize_transaction(t) for t in SavingsLedgerService.list_transactions(student_id)]
    return JsonResponse({"success": True, "count": len(transactions), "transactions": transactions})

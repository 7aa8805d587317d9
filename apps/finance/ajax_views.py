# finance/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from django.http import JsonResponse, HttpResponse
import logging

from core.utils import json_endpoint, json_error, parse_json_body, form_errors
from utils.models import FinancialAuditLog
from .exporters import export_financial_report
from .forms import OtherIncomeForm, ExpenseForm, FinancialReportFilterForm, FinancialReportExportForm
from .reports import FinancialReportFilters, generate_financial_report
from .services import IncomeService, ExpenseService

logger = logging.getLogger(__name__)


def serialize_other_income(income):
    return {
        'id': str(income.id),
        'category': income.category,
        'title': income.title,
        'description': income.description,
        'amount': income.amount,
        'income_date': income.income_date,
        'created_by': income.created_by_id,
        'created_at': income.created_at,
    }


def serialize_expense(expense):
    return {
        'id': str(expense.id),
        'category': expense.category,
        'title': expense.title,
        'description': expense.description,
        'amount': expense.amount,
        'expense_date': expense.expense_date,
        'receipt_url': expense.receipt_url,
        'created_by': expense.created_by_id,
        'created_at': expense.created_at,
    }


# =============================================================================
# OTHER INCOME
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def create_other_income(request):
    form = OtherIncomeForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    income = IncomeService.create_other_income(created_by=request.user, **form.cleaned_data)
    return JsonResponse(
        {"success": True, "message": "Income recorded successfully", "income": serialize_other_income(income)},
        status=201
    )


@login_required
@require_GET
@json_endpoint
def other_income_list(request):
    incomes = [serialize_other_income(i) for i in IncomeService.get_other_incomes()]
    return JsonResponse({"success": True, "count": len(incomes), "incomes": incomes})


# =============================================================================
# EXPENSES
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def create_expense(request):
    form = ExpenseForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    expense = ExpenseService.create_expense(created_by=request.user, **form.cleaned_data)
    return JsonResponse(
        {"success": True, "message": "Expense recorded successfully", "expense": serialize_expense(expense)},
        status=201
    )


@login_required
@require_GET
@json_endpoint
def expense_list(request):
    expenses = [serialize_expense(e) for e in ExpenseService.get_expenses()]
    return JsonResponse({"success": True, "count": len(expenses), "expenses": expenses})


# =============================================================================
# REPORTS
# =============================================================================

@login_required
@require_GET
@json_endpoint
def financial_report(request):
    """
    AJAX view returning period totals. Filters come from the query string:
    start_date, end_date, student_id, class_id, payment_status, bill_type.
    """
    form = FinancialReportFilterForm(request.GET)
    if not form.is_valid():
        return json_error("Invalid filters.", status=400, error='validation_error', errors=form_errors(form))

    filters = FinancialReportFilters.from_data(form.cleaned_data)
    report = generate_financial_report(filters)

    FinancialAuditLog.log_financial_action(
        action='FINANCIAL_REPORT_GENERATE',
        amount=report['net_income'],
        additional_data={key: str(value) for key, value in request.GET.items()},
    )

    return JsonResponse({"success": True, "report": report})


@login_required
@require_GET
@json_endpoint
def export_report(request):
    """Download the financial report as PDF or Excel (?export_format=pdf|excel)"""
    form = FinancialReportExportForm(request.GET)
    if not form.is_valid():
        return json_error("Invalid filters.", status=400, error='validation_error', errors=form_errors(form))

    export_format = form.cleaned_data.pop('export_format')
    exported = export_financial_report(FinancialReportFilters.from_data(form.cleaned_data), export_format)

    response = HttpResponse(exported.content, content_type=exported.content_type)
    response['Content-Disposition'] = f'attachment; filename="{exported.filename}"'
    return response

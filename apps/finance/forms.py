# finance/forms.py

from django import forms
from decimal import Decimal

from fees.models import Bill, Payment
from core.utils import validate_date_range
from .models import OtherIncome, Expense
from .exporters import EXPORT_FORMAT_CHOICES


class OtherIncomeForm(forms.Form):
    category = forms.ChoiceField(choices=OtherIncome.CATEGORY_CHOICES)
    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    income_date = forms.DateField()


class ExpenseForm(forms.Form):
    category = forms.ChoiceField(choices=Expense.CATEGORY_CHOICES)
    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    expense_date = forms.DateField()
    receipt_url = forms.CharField(max_length=500, required=False)


class FinancialReportFilterForm(forms.Form):
    """Query-string filters for the report summary and export endpoints"""
    start_date = forms.DateField(required=False)
    end_date = forms.DateField(required=False)
    student_id = forms.UUIDField(required=False)
    class_id = forms.UUIDField(required=False)
    payment_status = forms.ChoiceField(choices=[('', '---')] + Payment.PAYMENT_STATUS_CHOICES, required=False)
    bill_type = forms.ChoiceField(choices=[('', '---')] + Bill.BILL_TYPE_CHOICES, required=False)

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')

        if start_date and end_date:
            is_valid, error = validate_date_range(start_date, end_date)
            if not is_valid:
                raise forms.ValidationError(error)

        return cleaned_data


class FinancialReportExportForm(FinancialReportFilterForm):
    export_format = forms.ChoiceField(choices=EXPORT_FORMAT_CHOICES)

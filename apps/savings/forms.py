# savings/forms.py

from django import forms
from decimal import Decimal

from .models import SavingsTransaction


class SavingsTransactionForm(forms.Form):
    student_id = forms.UUIDField()
    transaction_type = forms.ChoiceField(choices=SavingsTransaction.TRANSACTION_TYPES)
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    transaction_date = forms.DateTimeField()
    description = forms.CharField(required=False)

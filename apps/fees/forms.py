# fees/forms.py

from django import forms
from decimal import Decimal

from .models import Bill, Payment


class BillForm(forms.Form):
    student_id = forms.UUIDField()
    bill_type = forms.ChoiceField(choices=Bill.BILL_TYPE_CHOICES)
    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    due_date = forms.DateField()


class CancelBillForm(forms.Form):
    reason = forms.CharField(max_length=200)


class PaymentForm(forms.Form):
    bill_id = forms.UUIDField()
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    payment_method = forms.ChoiceField(choices=Payment.PAYMENT_METHOD_CHOICES)
    payment_date = forms.DateTimeField()
    reference_number = forms.CharField(max_length=100, required=False)
    notes = forms.CharField(required=False)

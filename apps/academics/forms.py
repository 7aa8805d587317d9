# academics/forms.py

from django import forms
from decimal import Decimal


class ClassForm(forms.Form):
    name = forms.CharField(max_length=100)
    description = forms.CharField(required=False)
    monthly_fee = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    is_active = forms.BooleanField(required=False)

    def __init__(self, data=None, *args, **kwargs):
        if data is not None and 'is_active' not in data:
            data = {**data, 'is_active': True}
        super().__init__(data, *args, **kwargs)

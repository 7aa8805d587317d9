# accounts/forms.py
from django import forms
from .models import UserProfile, phone_validator


class UserCreateForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(min_length=6, strip=False)
    full_name = forms.CharField(max_length=200)
    role = forms.ChoiceField(choices=UserProfile.USER_ROLES)
    phone_number = forms.CharField(max_length=16, required=False, validators=[phone_validator])
    is_active = forms.BooleanField(required=False, initial=True)

    def __init__(self, data=None, *args, **kwargs):
        # JSON clients usually omit is_active; absent means active
        if data is not None and 'is_active' not in data:
            data = {**data, 'is_active': True}
        super().__init__(data, *args, **kwargs)

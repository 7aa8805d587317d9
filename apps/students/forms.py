# students/forms.py

from django import forms


class StudentForm(forms.Form):
    admission_number = forms.CharField(max_length=50)
    full_name = forms.CharField(max_length=200)
    date_of_birth = forms.DateField()
    parent_id = forms.IntegerField(min_value=1)
    class_id = forms.UUIDField()
    enrollment_date = forms.DateField()
    is_active = forms.BooleanField(required=False)

    def __init__(self, data=None, *args, **kwargs):
        if data is not None and 'is_active' not in data:
            data = {**data, 'is_active': True}
        super().__init__(data, *args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        born = cleaned_data.get('date_of_birth')
        enrolled = cleaned_data.get('enrollment_date')
        if born and enrolled and enrolled < born:
            self.add_error('enrollment_date', "Enrollment date cannot be before date of birth.")
        return cleaned_data

# savings/urls.py

from django.urls import path
from . import ajax_views

app_name = 'savings'

urlpatterns = [
    path('transactions/create/', ajax_views.record_transaction, name='record_transaction'),
    path('student/<uuid:student_id>/balance/', ajax_views.student_balance, name='student_balance'),
    path('student/<uuid:student_id>/transactions/', ajax_views.student_transactions, name='student_transactions'),
]

# fees/urls.py

from django.urls import path
from . import ajax_views

app_name = 'fees'

urlpatterns = [
    # =============================================================================
    # BILLS
    # =============================================================================
    path('bills/create/', ajax_views.create_bill, name='create_bill'),
    path('bills/<uuid:bill_id>/cancel/', ajax_views.cancel_bill, name='cancel_bill'),
    path('bills/student/<uuid:student_id>/', ajax_views.bills_by_student, name='bills_by_student'),
    path('bills/parent/<int:parent_id>/active/', ajax_views.active_bills_by_parent, name='active_bills_by_parent'),

    # =============================================================================
    # PAYMENTS
    # =============================================================================
    path('payments/create/', ajax_views.create_payment, name='create_payment'),
    path('payments/parent/<int:parent_id>/', ajax_views.payment_history_by_parent, name='payment_history_by_parent'),
    path('payments/<uuid:payment_id>/receipt/', ajax_views.payment_receipt, name='payment_receipt'),
]

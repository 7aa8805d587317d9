# finance/urls.py

from django.urls import path
from . import ajax_views

app_name = 'finance'

urlpatterns = [
    # Other income
    path('incomes/', ajax_views.other_income_list, name='other_income_list'),
    path('incomes/create/', ajax_views.create_other_income, name='create_other_income'),

    # Expenses
    path('expenses/', ajax_views.expense_list, name='expense_list'),
    path('expenses/create/', ajax_views.create_expense, name='create_expense'),

    # Reports
    path('reports/summary/', ajax_views.financial_report, name='financial_report'),
    path('reports/export/', ajax_views.export_report, name='export_report'),
]

# finance/admin.py

from django.contrib import admin
from .models import OtherIncome, Expense


@admin.register(OtherIncome)
class OtherIncomeAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'amount', 'income_date', 'created_at']
    list_filter = ['category', 'income_date']
    search_fields = ['title', 'description']
    date_hierarchy = 'income_date'
    readonly_fields = ['created_at', 'updated_at', 'created_by_id', 'updated_by_id']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'amount', 'expense_date', 'created_at']
    list_filter = ['category', 'expense_date']
    search_fields = ['title', 'description']
    date_hierarchy = 'expense_date'
    readonly_fields = ['created_at', 'updated_at', 'created_by_id', 'updated_by_id']

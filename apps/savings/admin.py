# savings/admin.py

from django.contrib import admin
from .models import SavingsTransaction


@admin.register(SavingsTransaction)
class SavingsTransactionAdmin(admin.ModelAdmin):
    """Read-only view of the savings ledger; entries are written by the ledger service only"""
    list_display = ['transaction_date', 'student', 'transaction_type', 'amount', 'balance_after', 'sequence']
    list_filter = ['transaction_type', 'transaction_date']
    search_fields = ['student__full_name', 'student__admission_number', 'description']
    ordering = ['student', '-sequence']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

# utils/admin.py

from django.contrib import admin
from .models import FinancialAuditLog


@admin.register(FinancialAuditLog)
class FinancialAuditLogAdmin(admin.ModelAdmin):
    list_display = [
        'timestamp', 'action', 'object_type', 'amount_involved',
        'student_name', 'user_name', 'ip_address'
    ]
    list_filter = ['action', 'timestamp']
    search_fields = ['object_description', 'user_name', 'student_name', 'object_id']
    readonly_fields = [
        'id', 'timestamp', 'action', 'user_id', 'user_name', 'ip_address',
        'object_type', 'object_id', 'object_description', 'amount_involved',
        'currency', 'student_id', 'student_name', 'additional_data', 'notes',
    ]

    fieldsets = (
        ('What Happened', {
            'fields': ('action', 'object_type', 'object_id', 'object_description')
        }),
        ('Money', {
            'fields': ('amount_involved', 'currency', 'student_id', 'student_name')
        }),
        ('Who & When', {
            'fields': ('user_id', 'user_name', 'ip_address', 'timestamp')
        }),
        ('Additional Info', {
            'fields': ('additional_data', 'notes'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        # Audit logs should not be created manually
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

# utils/models.py

"""
Base models for the school finance system with audit trail support
and timezone-aware timestamp handling.

Key Features:
- Automatic school timezone handling for all timestamps
- User and IP tracking from the request context
- Change reason tracking
- Append-only financial audit log
"""

from django.db import models
from decimal import Decimal, InvalidOperation
import uuid
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# BASE MODEL
# =============================================================================

class BaseModel(models.Model):
    """
    Base model with audit trail fields and school timezone support.

    Features:
    - Automatic user tracking (who created/updated)
    - Real IP address tracking (where operations came from)
    - Change reason tracking (why changes were made)
    - School timezone-aware timestamps (when operations happened)

    Timezone Behavior:
    - created_at / updated_at are set from core.utils.get_school_current_time()
    - Fee deadlines, savings entries and reports use consistent school time
    """

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Timestamp fields - set in save() using school timezone
    created_at = models.DateTimeField(
        "Created At",
        db_index=True,
        help_text="When this record was created (in school's operational timezone)"
    )
    updated_at = models.DateTimeField(
        "Updated At",
        db_index=True,
        help_text="When this record was last updated (in school's operational timezone)"
    )

    # User tracking
    created_by_id = models.CharField(
        "Created By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who last updated this record"
    )

    # IP tracking
    created_from_ip = models.GenericIPAddressField(
        "Created From IP",
        null=True,
        blank=True,
        help_text="IP address from which this record was created"
    )
    updated_from_ip = models.GenericIPAddressField(
        "Updated From IP",
        null=True,
        blank=True,
        help_text="IP address from which this record was last updated"
    )

    change_reason = models.CharField(
        "Change Reason",
        max_length=255,
        blank=True,
        null=True,
        help_text="Explanation for why this change was made"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Override save to:
        1. Set timestamps in school timezone
        2. Populate audit trail fields (created_by, updated_by, IPs)
        """
        from utils.context import get_request_context
        from core.utils import get_school_current_time

        is_new = self._state.adding
        now = get_school_current_time()

        # -------------------------------------------------------------------------
        # Timestamps
        # -------------------------------------------------------------------------
        if is_new:
            if not self.created_at:
                self.created_at = now
            if not self.updated_at:
                self.updated_at = now
        else:
            self.updated_at = now
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'updated_at' not in update_fields:
                kwargs['update_fields'] = list(update_fields) + ['updated_at']

        # -------------------------------------------------------------------------
        # Audit fields from request context
        # -------------------------------------------------------------------------
        context = get_request_context()

        if context:
            user = context.get('user')
            ip_address = context.get('ip_address')

            if is_new:
                if user and not self.created_by_id:
                    self.created_by_id = str(user.pk)
                if ip_address and not self.created_from_ip:
                    self.created_from_ip = ip_address

            if user:
                self.updated_by_id = str(user.pk)
            if ip_address:
                self.updated_from_ip = ip_address
        elif is_new:
            logger.debug(
                f"No request context available when creating {self.__class__.__name__}. "
                f"Audit fields will not be populated."
            )

        return super().save(*args, **kwargs)

    # -------------------------------------------------------------------------
    # AUDIT TRAIL HELPER METHODS
    # -------------------------------------------------------------------------

    def set_change_reason(self, reason):
        """
        Set the reason for the next change to this object.

        Usage:
            bill.set_change_reason("Cancelled at parent's request")
            bill.save()
        """
        self.change_reason = reason


# =============================================================================
# FINANCIAL AUDIT LOG
# =============================================================================

class FinancialAuditLog(models.Model):
    """
    Append-only audit log for financial transactions.

    Entries are written inside the same database transaction as the action
    they describe, so a rolled-back payment or savings entry leaves no trace
    here either.
    """

    FINANCIAL_ACTIONS = [
        # Billing
        ('BILL_CREATE', 'Bill Created'),
        ('BILL_STATUS_CHANGE', 'Bill Status Changed'),
        ('PAYMENT_RECEIVE', 'Payment Received'),

        # Savings
        ('SAVINGS_DEPOSIT', 'Savings Deposit'),
        ('SAVINGS_WITHDRAWAL', 'Savings Withdrawal'),

        # Income & expenses
        ('INCOME_CREATE', 'Other Income Recorded'),
        ('EXPENSE_CREATE', 'Expense Created'),

        # Reporting
        ('FINANCIAL_REPORT_GENERATE', 'Financial Report Generated'),
        ('FINANCIAL_DATA_EXPORT', 'Financial Data Exported'),
    ]

    id = models.AutoField(primary_key=True)

    timestamp = models.DateTimeField(
        db_index=True,
        help_text="When this financial action occurred (in school's operational timezone)"
    )

    action = models.CharField(max_length=30, choices=FINANCIAL_ACTIONS, db_index=True)

    # User information
    user_id = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who performed this action"
    )
    user_name = models.CharField(max_length=200, null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    # Target object
    object_type = models.CharField(max_length=100, null=True, blank=True)
    object_id = models.CharField(max_length=100, null=True, blank=True)
    object_description = models.CharField(max_length=500, null=True, blank=True)

    # Financial-specific fields
    amount_involved = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Monetary amount involved in the action"
    )
    currency = models.CharField(max_length=3, null=True, blank=True, default='UGX')

    # Student context
    student_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    student_name = models.CharField(max_length=200, null=True, blank=True)

    additional_data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Additional context-specific data"
    )
    notes = models.TextField(null=True, blank=True)

    class Meta:
        verbose_name = "Financial Audit Log"
        verbose_name_plural = "Financial Audit Logs"
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['timestamp', 'action'], name='fin_audit_ts_action_idx'),
            models.Index(fields=['student_id', 'timestamp'], name='fin_audit_student_ts_idx'),
        ]

    def __str__(self):
        return f"{self.get_action_display()} at {self.timestamp}"

    def save(self, *args, **kwargs):
        from core.utils import get_school_current_time

        if not self.timestamp:
            self.timestamp = get_school_current_time()
        return super().save(*args, **kwargs)

    @classmethod
    def log_financial_action(
        cls,
        action,
        user=None,
        target_object=None,
        amount=None,
        student=None,
        additional_data=None,
        notes=None,
    ):
        """
        Record a financial action.

        The acting user and client IP default to the current request
        context (see utils.context) when ``user`` is not given.

        Args:
            action: Action type from FINANCIAL_ACTIONS
            user: User performing the action
            target_object: Model instance acted upon
            amount: Monetary amount involved
            student: Student the action concerns
            additional_data: JSON-serialisable extra context
            notes: Free-text notes

        Returns:
            FinancialAuditLog: The created entry

        Example:
            FinancialAuditLog.log_financial_action(
                action='PAYMENT_RECEIVE',
                target_object=payment,
                amount=payment.amount,
                student=payment.bill.student,
            )
        """
        from utils.context import get_request_context
        from core.utils import get_base_currency

        context = get_request_context() or {}
        if user is None:
            user = context.get('user')

        log_data = {
            'action': action,
            'notes': (notes or '')[:2000],
            'additional_data': additional_data or {},
            'currency': get_base_currency()[:3].upper(),
            'ip_address': context.get('ip_address'),
        }

        if amount is not None:
            try:
                log_data['amount_involved'] = Decimal(str(amount))
            except (ValueError, InvalidOperation, TypeError):
                logger.warning(f"Invalid amount for financial audit log: {amount}")

        if user is not None:
            full_name = user.get_full_name() if hasattr(user, 'get_full_name') else ''
            log_data.update({
                'user_id': str(user.pk),
                'user_name': (full_name or getattr(user, 'username', '') or str(user))[:200],
            })

        if target_object is not None:
            log_data.update({
                'object_type': target_object._meta.label,
                'object_id': str(target_object.pk),
                'object_description': str(target_object)[:500],
            })

        if student is not None:
            log_data.update({
                'student_id': str(student.pk),
                'student_name': str(getattr(student, 'full_name', student))[:200],
            })

        return cls.objects.create(**log_data)

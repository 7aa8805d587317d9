# finance/models.py

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# OTHER INCOME
# =============================================================================

class OtherIncome(BaseModel):
    """
    Income that does not come from student fees (donations, grants, ...).

    The recording administrator is kept in BaseModel.created_by_id.
    """

    CATEGORY_CHOICES = [
        ('DONATION', 'Donation'),
        ('FUNDRAISING', 'Fundraising'),
        ('GOVERNMENT_AID', 'Government Aid'),
        ('INVESTMENT', 'Investment'),
        ('OTHER', 'Other'),
    ]

    # -------------------------------------------------------------------------
    # BASIC DETAILS
    # -------------------------------------------------------------------------

    category = models.CharField("Category", max_length=20, choices=CATEGORY_CHOICES, db_index=True)
    title = models.CharField("Title", max_length=200)
    description = models.TextField("Description", blank=True, null=True)

    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    income_date = models.DateField("Income Date", db_index=True)

    class Meta:
        verbose_name = "Other Income"
        verbose_name_plural = "Other Income"
        ordering = ['-income_date', '-created_at']
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name='other_income_amount_positive'),
        ]

    def __str__(self):
        return f"{self.title} - {self.amount}"


# =============================================================================
# EXPENSE
# =============================================================================

class Expense(BaseModel):
    """
    Money spent by the school.

    The recording administrator is kept in BaseModel.created_by_id.
    """

    CATEGORY_CHOICES = [
        ('SALARY', 'Salary'),
        ('UTILITIES', 'Utilities'),
        ('SUPPLIES', 'Supplies'),
        ('MAINTENANCE', 'Maintenance'),
        ('FOOD', 'Food'),
        ('TRANSPORTATION', 'Transportation'),
        ('MARKETING', 'Marketing'),
        ('TRAINING', 'Training'),
        ('OTHER', 'Other'),
    ]

    # -------------------------------------------------------------------------
    # BASIC DETAILS
    # -------------------------------------------------------------------------

    category = models.CharField("Category", max_length=20, choices=CATEGORY_CHOICES, db_index=True)
    title = models.CharField("Title", max_length=200)
    description = models.TextField("Description", blank=True, null=True)

    # -------------------------------------------------------------------------
    # FINANCIAL DETAILS
    # -------------------------------------------------------------------------

    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    expense_date = models.DateField("Expense Date", db_index=True)
    receipt_url = models.CharField("Receipt URL", max_length=500, blank=True, null=True)

    class Meta:
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name='expense_amount_positive'),
        ]

    def __str__(self):
        return f"{self.title} - {self.amount}"

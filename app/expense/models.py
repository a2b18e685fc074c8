from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from core.models import AuditableModel
from .enums import EXPENSE_STATUS_OPTIONS, APPROVAL_ACTION_OPTIONS, DRAFT


class Expense(AuditableModel):
    organisation = models.ForeignKey(
        "organisation.Organisation", on_delete=models.CASCADE, related_name="expenses"
    )
    user = models.ForeignKey(
        "user.User", on_delete=models.CASCADE, related_name="expenses"
    )
    category = models.ForeignKey(
        "category.Category", on_delete=models.PROTECT, related_name="expenses"
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    amount = models.DecimalField(
        decimal_places=2,
        max_digits=12,
        validators=[MinValueValidator(Decimal("0"))],
    )
    expense_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=EXPENSE_STATUS_OPTIONS, default=DRAFT
    )
    rejection_reason = models.TextField(blank=True, null=True)
    receipt_url = models.TextField(blank=True, null=True)
    receipt = models.FileField(upload_to="expense_receipts/", null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    reimbursed_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        "user.User",
        on_delete=models.SET_NULL,
        related_name="expense_approvals",
        null=True,
        blank=True,
    )
    rejected_by = models.ForeignKey(
        "user.User",
        on_delete=models.SET_NULL,
        related_name="expense_rejections",
        null=True,
        blank=True,
    )
    reimbursed_by = models.ForeignKey(
        "user.User",
        on_delete=models.SET_NULL,
        related_name="expense_reimbursements",
        null=True,
        blank=True,
    )

    def __str__(self):
        return self.title

    class Meta:
        ordering = ("-created_at",)


class ExpenseApproval(AuditableModel):
    """One lifecycle event of an expense."""

    expense = models.ForeignKey(
        Expense, on_delete=models.CASCADE, related_name="approvals"
    )
    actor = models.ForeignKey(
        "user.User",
        on_delete=models.SET_NULL,
        related_name="expense_actions",
        null=True,
    )
    action = models.CharField(max_length=20, choices=APPROVAL_ACTION_OPTIONS)
    comment = models.TextField(blank=True, null=True)

    def __str__(self):
        return f"{self.action} {self.expense_id}"

    class Meta:
        ordering = ("created_at",)

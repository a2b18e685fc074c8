from policy.enums import (
    EXPENSE_STATUS_OPTIONS,
    DRAFT,
    SUBMITTED,
    APPROVED,
    REJECTED,
    REIMBURSED,
)

APPROVAL_ACTION_OPTIONS = (
    (SUBMITTED, "SUBMITTED"),
    (APPROVED, "APPROVED"),
    (REJECTED, "REJECTED"),
    (REIMBURSED, "REIMBURSED"),
)

REVIEWED_STATUSES = (APPROVED, REJECTED, REIMBURSED)

__all__ = [
    "EXPENSE_STATUS_OPTIONS",
    "APPROVAL_ACTION_OPTIONS",
    "REVIEWED_STATUSES",
    "DRAFT",
    "SUBMITTED",
    "APPROVED",
    "REJECTED",
    "REIMBURSED",
]

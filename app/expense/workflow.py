"""
Server side execution of expense lifecycle transitions.

Every function checks the authorization matrix first, validates its
input, then locks the expense row and re-reads its status before the
transition table decides the outcome. Two reviewers racing on the same
expense are serialised by the row lock: the second one sees the new
status and gets InvalidTransitionError.
"""
import logging

from django.db import transaction
from django.utils import timezone

from policy import authorize, next_status, validate_rejection_reason
from policy.enums import (
    CREATE,
    EDIT_DRAFT,
    DELETE_DRAFT,
    SUBMIT,
    APPROVE,
    REJECT,
    REIMBURSE,
)
from .enums import DRAFT, SUBMITTED, APPROVED, REJECTED, REIMBURSED
from .models import Expense, ExpenseApproval
from .tasks import send_expense_status_email

logger = logging.getLogger(__name__)

LOGGED_ACTIONS = {
    SUBMIT: SUBMITTED,
    APPROVE: APPROVED,
    REJECT: REJECTED,
    REIMBURSE: REIMBURSED,
}

NOTIFIED_ACTIONS = (APPROVE, REJECT, REIMBURSE)

EDITABLE_FIELDS = (
    "title",
    "description",
    "amount",
    "category",
    "expense_date",
    "receipt_url",
    "receipt",
)


def lock_expense(expense):
    return Expense.objects.select_for_update().get(id=expense.id)


def create_expense(actor, **fields):
    authorize(actor, CREATE)
    expense = Expense.objects.create(
        organisation=actor.organisation, user=actor, status=DRAFT, **fields
    )
    logger.info("%s created expense %s", actor.email, expense.id)
    return expense


@transaction.atomic
def edit_draft(actor, expense, **fields):
    authorize(actor, EDIT_DRAFT, owner_id=expense.user_id)
    expense = lock_expense(expense)
    expense.status = next_status(expense.status, EDIT_DRAFT)
    for name, value in fields.items():
        if name in EDITABLE_FIELDS:
            setattr(expense, name, value)
    expense.save()
    return expense


@transaction.atomic
def delete_draft(actor, expense):
    authorize(actor, DELETE_DRAFT, owner_id=expense.user_id)
    expense = lock_expense(expense)
    next_status(expense.status, DELETE_DRAFT)
    expense_id = expense.id
    expense.delete()
    logger.info("%s deleted draft expense %s", actor.email, expense_id)


def transition(actor, expense, action, reason=None):
    """Apply submit, approve, reject or reimburse and return the saved expense."""
    authorize(actor, action, owner_id=expense.user_id)
    if action == REJECT:
        reason = validate_rejection_reason(reason)

    with transaction.atomic():
        expense = lock_expense(expense)
        expense.status = next_status(expense.status, action)
        now = timezone.now()
        if action == SUBMIT:
            expense.submitted_at = now
        elif action == APPROVE:
            expense.approved_at = now
            expense.approved_by = actor
        elif action == REJECT:
            expense.rejection_reason = reason
            expense.rejected_by = actor
        elif action == REIMBURSE:
            expense.reimbursed_at = now
            expense.reimbursed_by = actor
        expense.save()

        ExpenseApproval.objects.create(
            expense=expense,
            actor=actor,
            action=LOGGED_ACTIONS[action],
            comment=reason,
        )
        if action in NOTIFIED_ACTIONS:
            expense_id = str(expense.id)
            transaction.on_commit(
                lambda: send_expense_status_email.delay(expense_id)
            )

    logger.info(
        "%s moved expense %s to %s", actor.email, expense.id, expense.status
    )
    return expense


def submit(actor, expense):
    return transition(actor, expense, SUBMIT)


def approve(actor, expense):
    return transition(actor, expense, APPROVE)


def reject(actor, expense, reason):
    return transition(actor, expense, REJECT, reason=reason)


def reimburse(actor, expense):
    return transition(actor, expense, REIMBURSE)

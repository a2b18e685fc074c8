from .enums import (
    APPROVE,
    APPROVED,
    DELETE_DRAFT,
    DRAFT,
    EDIT_DRAFT,
    REIMBURSE,
    REIMBURSED,
    REJECT,
    REJECTED,
    SUBMIT,
    SUBMITTED,
)
from .exceptions import InvalidTransitionError, ValidationError

# (from status, action) -> resulting status. None means the expense is removed.
TRANSITIONS = {
    (DRAFT, SUBMIT): SUBMITTED,
    (SUBMITTED, APPROVE): APPROVED,
    (SUBMITTED, REJECT): REJECTED,
    (APPROVED, REIMBURSE): REIMBURSED,
    (DRAFT, DELETE_DRAFT): None,
    (DRAFT, EDIT_DRAFT): DRAFT,
}

TERMINAL_STATUSES = frozenset({REJECTED, REIMBURSED})


def next_status(status, action):
    try:
        return TRANSITIONS[(status, action)]
    except KeyError:
        raise InvalidTransitionError(status, action)


def can_transition(status, action) -> bool:
    return (status, action) in TRANSITIONS


def allowed_actions(status) -> list:
    return [action for (source, action) in TRANSITIONS if source == status]


def is_terminal(status) -> bool:
    return status in TERMINAL_STATUSES


def validate_rejection_reason(reason) -> str:
    if reason is None or not str(reason).strip():
        raise ValidationError("A reason is required to reject an expense.", field="reason")
    return str(reason).strip()

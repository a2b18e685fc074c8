"""
Role based authorization matrix.

Every permission decision in the backend and in the client store goes
through ``is_allowed`` and ``authorize``; views never branch on roles
themselves.
"""
from .enums import (
    ADMIN,
    APPROVE,
    CREATE,
    DELETE_DRAFT,
    EDIT_DRAFT,
    EMPLOYEE,
    FINANCE,
    MANAGE_CATEGORIES,
    MANAGE_USERS,
    MANAGER,
    OWNER_ONLY_ACTIONS,
    REIMBURSE,
    REJECT,
    REVIEW_ACTIONS,
    SUBMIT,
)
from .exceptions import AuthorizationError

ALL_ROLES = frozenset({EMPLOYEE, MANAGER, FINANCE, ADMIN})
REVIEWERS = frozenset({MANAGER, FINANCE, ADMIN})
PAYERS = frozenset({FINANCE, ADMIN})
ADMINS = frozenset({ADMIN})

PERMISSIONS = {
    CREATE: ALL_ROLES,
    EDIT_DRAFT: ALL_ROLES,
    DELETE_DRAFT: ALL_ROLES,
    SUBMIT: ALL_ROLES,
    APPROVE: REVIEWERS,
    REJECT: REVIEWERS,
    REIMBURSE: PAYERS,
    MANAGE_USERS: ADMINS,
    MANAGE_CATEGORIES: ADMINS,
}


def is_allowed(role: str, action: str) -> bool:
    return role in PERMISSIONS.get(action, frozenset())


def is_owner(actor, owner_id) -> bool:
    return owner_id is not None and str(actor.id) == str(owner_id)


def authorize(actor, action: str, owner_id=None):
    """
    Raise AuthorizationError unless ``actor`` may perform ``action``.

    ``actor`` is anything exposing ``id``, ``role`` and ``is_active``.
    ``owner_id`` is the owner of the targeted expense, when there is one:
    owner-only actions require the actor to be the owner and review
    actions forbid it.
    """
    role = getattr(actor, "role", None)

    if not getattr(actor, "is_active", True):
        raise AuthorizationError(action, role, "Account is deactivated.")

    if not is_allowed(role, action):
        raise AuthorizationError(action, role)

    if owner_id is None:
        return

    if action in OWNER_ONLY_ACTIONS and not is_owner(actor, owner_id):
        raise AuthorizationError(
            action, role, f"Only the owner of an expense can {action} it."
        )
    if action in REVIEW_ACTIONS and is_owner(actor, owner_id):
        raise AuthorizationError(
            action, role, f"You cannot {action} your own expense."
        )

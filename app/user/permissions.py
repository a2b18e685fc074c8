from rest_framework import permissions

from policy import authorize
from policy.enums import (
    APPROVE,
    REIMBURSE,
    MANAGE_USERS,
    MANAGE_CATEGORIES,
)


class ActionPermission(permissions.BasePermission):
    """
    Checks the authenticated user's role against the authorization matrix.

    A refusal raises AuthorizationError so the response carries the
    refused action and the caller's role.
    """

    policy_action = None

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        authorize(request.user, self.policy_action)
        return True


class CanApprove(ActionPermission):
    """Allows access only to reviewers (managers, finance and admins)."""

    policy_action = APPROVE


class CanReimburse(ActionPermission):
    """Allows access only to finance users and admins."""

    policy_action = REIMBURSE


class CanManageUsers(ActionPermission):
    """Allows access only to admins of the organisation."""

    policy_action = MANAGE_USERS


class CanManageCategories(ActionPermission):
    """Allows access only to admins of the organisation."""

    policy_action = MANAGE_CATEGORIES

from .authorization import authorize, is_allowed
from .exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    PolicyError,
    ValidationError,
)
from .transitions import next_status, validate_rejection_reason

__all__ = [
    "authorize",
    "is_allowed",
    "next_status",
    "validate_rejection_reason",
    "AuthorizationError",
    "InvalidTransitionError",
    "PolicyError",
    "ValidationError",
]

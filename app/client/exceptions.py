from policy.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    PolicyError,
    ValidationError,
)


class ApiError(Exception):
    """An HTTP call failed in a way the policy errors do not describe."""

    def __init__(self, detail, status_code=None, payload=None):
        self.detail = detail
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(detail)


class NetworkError(ApiError):
    """The backend could not be reached, timed out or failed with a 5xx."""


class NotFoundError(ApiError):
    pass


class AuthenticationError(ApiError):
    """Missing, expired or refused credentials."""


__all__ = [
    "ApiError",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidTransitionError",
    "NetworkError",
    "NotFoundError",
    "PolicyError",
    "ValidationError",
]

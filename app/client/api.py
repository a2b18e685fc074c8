"""
Thin wrapper over the expense REST API.

Every method returns decoded JSON. Failures are raised as the policy
errors (authorization, invalid transition, validation) when the backend
reports one of their codes, otherwise as an ApiError subclass.
"""
import logging

import requests

from .exceptions import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    InvalidTransitionError,
    NetworkError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def first_error(payload):
    """returns: (field, message) of the first entry of a DRF error map"""
    if not isinstance(payload, dict):
        return None, str(payload)
    if "detail" in payload:
        return payload.get("field"), str(payload["detail"])
    for field, messages in payload.items():
        message = messages[0] if isinstance(messages, list) and messages else messages
        if field == "non_field_errors":
            field = None
        return field, str(message)
    return None, "Invalid request."


def error_from_response(response):
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    code = payload.get("code") if isinstance(payload, dict) else None
    status_code = response.status_code
    field, detail = first_error(payload)

    if code == AuthorizationError.code:
        return AuthorizationError(payload.get("action"), payload.get("role"), detail)
    if code == InvalidTransitionError.code:
        return InvalidTransitionError(
            payload.get("current_status"), payload.get("action"), detail
        )
    if code == ValidationError.code or status_code == 400:
        return ValidationError(detail, field=field)
    if status_code == 401:
        return AuthenticationError(detail, status_code, payload)
    if status_code == 403:
        return AuthorizationError(None, None, detail)
    if status_code == 404:
        return NotFoundError(detail or "Not found.", status_code, payload)
    if status_code == 409:
        return InvalidTransitionError(None, None, detail)
    if status_code >= 500:
        return NetworkError(f"Server error ({status_code})", status_code, payload)
    return ApiError(detail, status_code, payload)


def unwrap(payload):
    """Strip the {"success": ..., "data": ...} envelope of action responses."""
    if isinstance(payload, dict) and "success" in payload and "data" in payload:
        return payload["data"]
    return payload


class ApiClient:
    def __init__(self, base_url, timeout=30.0, token=None, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self.session = session or requests.Session()

    def url(self, path):
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, **kwargs):
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = self.url(path)
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.Timeout as exc:
            raise NetworkError(f"Request to {url} timed out") from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc

        if response.status_code >= 400:
            error = error_from_response(response)
            logger.info("%s %s failed with %s: %s", method, url, response.status_code, error)
            raise error
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get_all(self, path, params=None):
        """Fetch every page of a list endpoint by following its next links."""
        payload = self.request("GET", path, params=params)
        if isinstance(payload, list):
            return payload
        results = list(payload["results"])
        while payload.get("next"):
            payload = self.request("GET", payload["next"])
            results.extend(payload["results"])
        return results

    # Auth

    def login(self, email, password):
        return self.request(
            "POST", "auth/login/", json={"email": email, "password": password}
        )

    def register(self, **data):
        return self.request("POST", "auth/register/", json=data)

    def me(self):
        return self.request("GET", "auth/me/")

    # Expenses

    def list_expenses(self, **params):
        return self.get_all("expenses/", params=params or None)

    def pending_expenses(self, **params):
        return self.get_all("expenses/pending/", params=params or None)

    def approved_expenses(self, **params):
        return self.get_all("expenses/approved/", params=params or None)

    def approval_history(self, **params):
        return self.get_all("expenses/approval-history/", params=params or None)

    def get_expense(self, expense_id):
        return self.request("GET", f"expenses/{expense_id}/")

    def expense_history(self, expense_id):
        return self.request("GET", f"expenses/{expense_id}/history/")

    def create_expense(self, data):
        return self.request("POST", "expenses/", json=data)

    def update_expense(self, expense_id, data):
        return self.request("PUT", f"expenses/{expense_id}/", json=data)

    def delete_expense(self, expense_id):
        return self.request("DELETE", f"expenses/{expense_id}/")

    def submit_expense(self, expense_id):
        return unwrap(self.request("POST", f"expenses/{expense_id}/submit/"))

    def approve_expense(self, expense_id):
        return unwrap(self.request("POST", f"expenses/{expense_id}/approve/"))

    def reject_expense(self, expense_id, reason):
        return unwrap(
            self.request(
                "POST", f"expenses/{expense_id}/reject/", json={"reason": reason}
            )
        )

    def reimburse_expense(self, expense_id):
        return unwrap(self.request("POST", f"expenses/{expense_id}/reimburse/"))

    # Categories

    def list_categories(self):
        return self.get_all("categories/")

    def all_categories(self):
        return self.get_all("categories/all/")

    def create_category(self, data):
        return self.request("POST", "categories/", json=data)

    def update_category(self, category_id, data):
        return self.request("PATCH", f"categories/{category_id}/", json=data)

    def toggle_category(self, category_id):
        return unwrap(self.request("POST", f"categories/{category_id}/toggle-active/"))

    # Users and organisation

    def list_users(self):
        return self.get_all("auth/users/")

    def update_user_role(self, user_id, role):
        return unwrap(
            self.request("PUT", f"auth/users/{user_id}/role/", json={"role": role})
        )

    def update_user_department(self, user_id, department):
        return unwrap(
            self.request(
                "PUT",
                f"auth/users/{user_id}/department/",
                json={"department": department},
            )
        )

    def toggle_user_active(self, user_id):
        return unwrap(self.request("POST", f"auth/users/{user_id}/toggle-active/"))

    def reset_user_password(self, user_id, new_password):
        return self.request(
            "POST",
            f"auth/users/{user_id}/reset-password/",
            json={"new_password": new_password},
        )

    def invite_code(self):
        return self.request("GET", "organisation/invite-code/")

    def list_organisations(self):
        return self.get_all("organisation/")

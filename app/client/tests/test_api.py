import json
from unittest import mock

import pytest
import requests

from client.api import ApiClient, error_from_response, first_error, unwrap
from client.exceptions import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    InvalidTransitionError,
    NetworkError,
    NotFoundError,
    ValidationError,
)

BASE_URL = "http://testserver/api/v1"


def make_response(status_code=200, payload=None):
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    response._content = b"" if payload is None else json.dumps(payload).encode()
    return response


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def api(session):
    return ApiClient(BASE_URL + "/", timeout=5, token="access-token", session=session)


def test_request_sends_bearer_token(api, session):
    session.request.return_value = make_response(200, {"id": "1"})

    assert api.get_expense("1") == {"id": "1"}

    session.request.assert_called_once_with(
        "GET",
        f"{BASE_URL}/expenses/1/",
        headers={"Authorization": "Bearer access-token"},
        timeout=5,
    )


def test_request_without_token_sends_no_authorization(session):
    api = ApiClient(BASE_URL, session=session)
    session.request.return_value = make_response(200, {"access": "a"})

    api.login("ada@example.com", "secret123")

    _, kwargs = session.request.call_args
    assert kwargs["headers"] == {}
    assert kwargs["json"] == {"email": "ada@example.com", "password": "secret123"}


def test_get_all_follows_next_links(api, session):
    next_url = f"{BASE_URL}/expenses/?page=2"
    session.request.side_effect = [
        make_response(200, {"next": next_url, "results": [{"id": "1"}, {"id": "2"}]}),
        make_response(200, {"next": None, "results": [{"id": "3"}]}),
    ]

    assert api.list_expenses() == [{"id": "1"}, {"id": "2"}, {"id": "3"}]
    assert session.request.call_count == 2
    assert session.request.call_args_list[1][0] == ("GET", next_url)


def test_get_all_accepts_unpaginated_lists(api, session):
    session.request.return_value = make_response(200, [{"id": "1"}])
    assert api.list_users() == [{"id": "1"}]


def test_delete_returns_none_on_no_content(api, session):
    session.request.return_value = make_response(204)
    assert api.delete_expense("1") is None


def test_transition_actions_are_unwrapped(api, session):
    session.request.return_value = make_response(
        200, {"success": True, "data": {"id": "1", "status": "SUBMITTED"}}
    )
    assert api.submit_expense("1") == {"id": "1", "status": "SUBMITTED"}


def test_reject_sends_reason(api, session):
    session.request.return_value = make_response(
        200, {"success": True, "data": {"id": "1", "status": "REJECTED"}}
    )
    api.reject_expense("1", "No receipt")
    args, kwargs = session.request.call_args
    assert args == ("POST", f"{BASE_URL}/expenses/1/reject/")
    assert kwargs["json"] == {"reason": "No receipt"}


def test_authorization_error_code_is_mapped(api, session):
    session.request.return_value = make_response(
        403,
        {
            "detail": "Role EMPLOYEE is not allowed to approve.",
            "code": "authorization_error",
            "action": "approve",
            "role": "EMPLOYEE",
        },
    )
    with pytest.raises(AuthorizationError) as exc:
        api.approve_expense("1")
    assert exc.value.action == "approve"
    assert exc.value.role == "EMPLOYEE"


def test_invalid_transition_code_is_mapped(api, session):
    session.request.return_value = make_response(
        409,
        {
            "detail": "Cannot approve an expense in APPROVED status.",
            "code": "invalid_transition",
            "current_status": "APPROVED",
            "action": "approve",
        },
    )
    with pytest.raises(InvalidTransitionError) as exc:
        api.approve_expense("1")
    assert exc.value.current_status == "APPROVED"


def test_field_errors_become_validation_errors(api, session):
    session.request.return_value = make_response(
        400, {"amount": ["Ensure this value is greater than or equal to 0."]}
    )
    with pytest.raises(ValidationError) as exc:
        api.create_expense({"amount": "-1"})
    assert exc.value.field == "amount"


def test_not_found_is_mapped(api, session):
    session.request.return_value = make_response(404, {"detail": "Not found."})
    with pytest.raises(NotFoundError) as exc:
        api.get_expense("missing")
    assert exc.value.status_code == 404


def test_unauthorized_is_mapped(api, session):
    session.request.return_value = make_response(
        401, {"detail": "Given token not valid for any token type"}
    )
    with pytest.raises(AuthenticationError):
        api.me()


def test_server_error_is_a_network_error(api, session):
    session.request.return_value = make_response(500)
    with pytest.raises(NetworkError) as exc:
        api.me()
    assert exc.value.status_code == 500


@pytest.mark.parametrize(
    "failure", [requests.exceptions.ConnectionError, requests.exceptions.Timeout]
)
def test_transport_failures_are_network_errors(api, session, failure):
    session.request.side_effect = failure("boom")
    with pytest.raises(NetworkError):
        api.me()


def test_unexpected_status_is_an_api_error():
    error = error_from_response(make_response(418, {"detail": "teapot"}))
    assert type(error) is ApiError
    assert error.detail == "teapot"


def test_first_error():
    assert first_error({"detail": "Nope"}) == (None, "Nope")
    assert first_error({"non_field_errors": ["Both given"]}) == (None, "Both given")
    assert first_error({"email": ["Taken"]}) == ("email", "Taken")
    assert first_error(["plain"]) == (None, "['plain']")


def test_unwrap_leaves_plain_payloads_alone():
    assert unwrap({"id": "1"}) == {"id": "1"}
    assert unwrap({"success": True, "data": [1]}) == [1]

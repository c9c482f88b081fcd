from unittest.mock import MagicMock, patch

import pytest
import requests

from infrastructure.api.errors import InvalidCredentialsError, SessionExpiredError, ValidationError
from infrastructure.api.gateway import RemoteServiceGateway
from infrastructure.repositories.sqlite_credential_repository import SQLiteCredentialRepository
from use_cases.session_flow import SessionController
from use_cases.session_store import SessionStore

USER = {
    "_id": "u-1",
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "role": "organizer",
}


def _response(status_code, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = b"{}" if body is not None else b""
    resp.json.return_value = body
    return resp


@pytest.fixture
def repository(tmp_path):
    repo = SQLiteCredentialRepository(str(tmp_path / "session.db"))
    repo.init_db()
    return repo


@pytest.fixture
def controller(repository):
    gateway = RemoteServiceGateway(base_url="http://api.test", timeout=1)
    return SessionController(SessionStore(repository), gateway)


def _auth_header(mock_request):
    return mock_request.call_args.kwargs["headers"].get("Authorization")


@patch("requests.request")
def test_initialize_without_credential_makes_no_call(mock_request, controller):
    assert controller.initialize() == "UNAUTHENTICATED"
    assert controller.identity is None
    mock_request.assert_not_called()


@patch("requests.request")
def test_initialize_restores_identity(mock_request, controller, repository):
    repository.save("tok-1")
    mock_request.return_value = _response(200, USER)
    seen = []
    controller.store.subscribe(lambda store: seen.append(store.state))

    assert controller.initialize() == "AUTHENTICATED"

    assert controller.identity.id == "u-1"
    assert controller.identity.role == "organizer"
    assert seen == ["RESTORING", "AUTHENTICATED"]
    assert mock_request.call_args.args[:2] == ("GET", "http://api.test/auth/me")
    assert _auth_header(mock_request) == "Bearer tok-1"


@patch("requests.request")
def test_initialize_with_rejected_credential_clears_it(mock_request, controller, repository):
    repository.save("stale")
    mock_request.return_value = _response(401, {"message": "Token expired"})

    assert controller.initialize() == "UNAUTHENTICATED"

    assert repository.load() is None
    assert controller.gateway.has_credential is False
    # Expected steady state, not an error to report
    assert controller.store.last_error is None


@patch("requests.request")
def test_initialize_network_failure_keeps_credential(mock_request, controller, repository):
    repository.save("tok-1")
    mock_request.side_effect = requests.ConnectionError("unreachable")

    assert controller.initialize() == "FAILED"

    assert repository.load() == "tok-1"
    assert controller.gateway.has_credential is False
    assert controller.store.last_error.kind == "ServiceError"


@patch("requests.request")
def test_login_persists_and_attaches_credential(mock_request, controller, repository):
    mock_request.return_value = _response(200, {"token": "tok-2", "user": USER})

    identity = controller.login(" Ada@Example.com ", "secret")

    assert identity.email == "ada@example.com"
    assert controller.state == "AUTHENTICATED"
    assert repository.load() == "tok-2"
    assert mock_request.call_args.kwargs["json"] == {"email": "ada@example.com", "password": "secret"}

    mock_request.return_value = _response(200, [])
    controller.gateway.list_events()
    assert _auth_header(mock_request) == "Bearer tok-2"


@patch("requests.request")
def test_login_with_wrong_password(mock_request, controller, repository):
    controller.initialize()
    mock_request.return_value = _response(401, {"message": "Invalid credentials"})

    with pytest.raises(InvalidCredentialsError) as excinfo:
        controller.login("ada@example.com", "wrong")

    assert excinfo.value.kind == "InvalidCredentials"
    assert controller.state == "UNAUTHENTICATED"
    assert repository.load() is None
    assert controller.gateway.has_credential is False


@patch("requests.request")
def test_failed_login_leaves_existing_session_untouched(mock_request, controller, repository):
    mock_request.return_value = _response(200, {"token": "tok-1", "user": USER})
    controller.login("ada@example.com", "secret")

    mock_request.return_value = _response(400, {"message": "Invalid credentials"})
    with pytest.raises(InvalidCredentialsError):
        controller.login("other@example.com", "nope")

    assert controller.state == "AUTHENTICATED"
    assert controller.identity.id == "u-1"
    assert repository.load() == "tok-1"


@patch("requests.request")
def test_signup_password_mismatch_is_local(mock_request, controller):
    with pytest.raises(ValidationError) as excinfo:
        controller.signup({"email": "a@b.com", "password": "one", "confirmPassword": "two"})

    assert "confirmPassword" in excinfo.value.details
    mock_request.assert_not_called()


@patch("requests.request")
def test_signup_success_never_sends_confirmation(mock_request, controller, repository):
    mock_request.return_value = _response(201, {"token": "tok-3", "user": {**USER, "role": "attendee"}})

    identity = controller.signup({
        "firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com",
        "password": "pw", "confirmPassword": "pw", "userType": "attendee",
    })

    assert identity.role == "attendee"
    assert "confirmPassword" not in mock_request.call_args.kwargs["json"]
    assert repository.load() == "tok-3"
    assert controller.gateway.has_credential is True


@patch("requests.request")
def test_signup_duplicate_email_propagates_validation_error(mock_request, controller, repository):
    mock_request.return_value = _response(409, {
        "message": "Email already registered",
        "errors": [{"path": "email", "msg": "Email already registered"}],
    })

    with pytest.raises(ValidationError) as excinfo:
        controller.signup({"email": "ada@example.com", "password": "pw"})

    assert excinfo.value.details == {"email": "Email already registered"}
    assert controller.state == "UNAUTHENTICATED"
    assert repository.load() is None


@patch("requests.request")
def test_logout_drops_credential_from_later_calls(mock_request, controller, repository):
    mock_request.return_value = _response(200, {"token": "tok-1", "user": USER})
    controller.login("ada@example.com", "secret")

    controller.logout()

    assert controller.state == "UNAUTHENTICATED"
    assert controller.identity is None
    assert repository.load() is None
    mock_request.return_value = _response(200, [])
    controller.gateway.list_events()
    assert _auth_header(mock_request) is None


@patch("requests.request")
def test_update_identity_keeps_server_owned_fields(mock_request, controller):
    mock_request.return_value = _response(200, {"token": "tok-1", "user": USER})
    controller.login("ada@example.com", "secret")

    updated = controller.update_identity({"_id": "hacked", "id": "hacked", "role": "admin", "firstName": "Augusta"})

    assert updated.first_name == "Augusta"
    assert updated.id == "u-1"
    assert updated.role == "organizer"
    assert controller.identity is updated


def test_update_identity_requires_session(controller):
    with pytest.raises(SessionExpiredError):
        controller.update_identity({"firstName": "X"})


@patch("requests.request")
def test_update_profile_uploads_image_then_saves(mock_request, controller):
    mock_request.return_value = _response(200, {"token": "tok-1", "user": USER})
    controller.login("ada@example.com", "secret")
    mock_request.side_effect = [
        _response(200, {"url": "https://cdn.example.com/me.png"}),
        _response(200, {**USER, "lastName": "King", "profileImage": "https://cdn.example.com/me.png"}),
    ]

    identity = controller.update_profile(
        {"lastName": "King", "currentPassword": "should-not-leak"},
        image=("me.png", b"png", "image/png"),
    )

    upload_call, profile_call = mock_request.call_args_list[-2:]
    assert upload_call.args[1] == "http://api.test/users/upload-image"
    assert profile_call.args[:2] == ("PUT", "http://api.test/users/profile")
    assert profile_call.kwargs["json"] == {"lastName": "King", "profileImage": "https://cdn.example.com/me.png"}
    assert identity.last_name == "King"
    assert identity.profile_image_ref == "https://cdn.example.com/me.png"


@patch("requests.request")
def test_change_password_mismatch_is_local(mock_request, controller):
    mock_request.return_value = _response(200, {"token": "tok-1", "user": USER})
    controller.login("ada@example.com", "secret")
    calls_before = mock_request.call_count

    with pytest.raises(ValidationError):
        controller.change_password("secret", "new-one", "new-two")
    assert mock_request.call_count == calls_before

    mock_request.return_value = _response(200, {"message": "Password updated"})
    controller.change_password("secret", "new-one", "new-one")
    assert mock_request.call_args.kwargs["json"] == {"currentPassword": "secret", "newPassword": "new-one"}


def test_listener_failure_does_not_break_transition(controller):
    controller.store.subscribe(MagicMock(side_effect=RuntimeError("view crashed")))
    assert controller.initialize() == "UNAUTHENTICATED"

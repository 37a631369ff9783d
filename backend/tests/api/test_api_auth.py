"""API tests for the authentication endpoints."""

from __future__ import annotations

from tests.helpers.auth import (
    REFRESH_URL,
    SIGNIN_URL,
    SIGNOUT_URL,
    SIGNUP_URL,
    bearer,
    signup_and_signin,
)


def test_signup_returns_201_with_message(client) -> None:
    resp = client.post(SIGNUP_URL, json={"username": "alice", "password": "p@ss"})

    assert resp.status_code == 201
    assert resp.get_json() == {"message": "User registered successfully!"}
    assert resp.headers.get("X-Request-ID")


def test_signup_duplicate_is_conflict_problem(client) -> None:
    client.post(SIGNUP_URL, json={"username": "alice", "password": "p@ss"})

    resp = client.post(SIGNUP_URL, json={"username": "alice", "password": "p@ss"})

    assert resp.status_code == 409
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "username_taken"
    assert body["detail"] == "Username is already taken!"
    assert body["request_id"]


def test_signup_validation_error(client) -> None:
    resp = client.post(SIGNUP_URL, json={"username": "alice"})

    assert resp.status_code == 422
    assert resp.mimetype == "application/problem+json"
    assert "password" in resp.get_json()["details"]["errors"]


def test_signin_returns_camel_case_jwt_response(client) -> None:
    body = signup_and_signin(client)

    assert set(body) == {"accessToken", "tokenType", "refreshToken", "userId", "username"}
    assert body["tokenType"] == "Bearer"
    assert body["username"] == "alice"
    assert isinstance(body["userId"], int)


def test_signin_bad_credentials_is_401(client) -> None:
    client.post(SIGNUP_URL, json={"username": "alice", "password": "p@ss"})

    resp = client.post(SIGNIN_URL, json={"username": "alice", "password": "wrong"})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "invalid_credentials"


def test_refresh_returns_new_access_token_same_refresh_token(client) -> None:
    body = signup_and_signin(client)

    resp = client.post(REFRESH_URL, json={"refreshToken": body["refreshToken"]})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["refreshToken"] == body["refreshToken"]
    assert data["accessToken"] != body["accessToken"]


def test_refresh_unknown_token_is_403(client) -> None:
    resp = client.post(REFRESH_URL, json={"refreshToken": "missing"})

    assert resp.status_code == 403
    body = resp.get_json()
    assert body["code"] == "refresh_token_not_found"
    assert body["detail"] == "Failed for [missing]: Refresh token is not in database!"


def test_signout_success_then_refresh_fails(client) -> None:
    body = signup_and_signin(client)

    resp = client.post(SIGNOUT_URL, headers=bearer(body["accessToken"]))

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Logout successful!"}
    resp = client.post(REFRESH_URL, json={"refreshToken": body["refreshToken"]})
    assert resp.status_code == 403


def test_signout_without_header_is_not_authenticated(client) -> None:
    resp = client.post(SIGNOUT_URL)

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "User is not authenticated"}


def test_signout_with_invalid_token_is_not_authenticated(client) -> None:
    resp = client.post(SIGNOUT_URL, headers=bearer("garbage"))

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "User is not authenticated"}


def test_signout_with_superseded_token_is_not_found(client) -> None:
    first = signup_and_signin(client)
    client.post(SIGNIN_URL, json={"username": "alice", "password": "p@ss"})

    resp = client.post(SIGNOUT_URL, headers=bearer(first["accessToken"]))

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Token not found, logout failed!"}


def test_request_id_is_echoed(client) -> None:
    resp = client.post(
        SIGNUP_URL,
        json={"username": "erin", "password": "p@ss"},
        headers={"X-Request-ID": "req-123"},
    )
    assert resp.headers["X-Request-ID"] == "req-123"

"""Authentication helpers for API tests."""

from __future__ import annotations

from typing import Any

SIGNUP_URL = "/api/v1/auth/signup"
SIGNIN_URL = "/api/v1/auth/signin"
REFRESH_URL = "/api/v1/auth/refreshtoken"
SIGNOUT_URL = "/api/v1/auth/signout"


def bearer(token: str) -> dict[str, str]:
    """Return an ``Authorization`` header for ``token``."""

    return {"Authorization": f"Bearer {token}"}


def signup_and_signin(client, username: str = "alice", password: str = "p@ss") -> dict[str, Any]:
    """Register ``username`` and sign in, returning the sign-in JSON body.

    Parameters
    ----------
    client:
        Flask test client.
    username, password:
        Credentials used for both calls.
    """

    resp = client.post(SIGNUP_URL, json={"username": username, "password": password})
    assert resp.status_code == 201, resp.get_json()
    resp = client.post(SIGNIN_URL, json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()

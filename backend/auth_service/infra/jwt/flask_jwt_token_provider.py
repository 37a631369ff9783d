# auth_service/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended.exceptions import JWTExtendedException

from auth_service.services._shared.errors import TokenError, TokenErrorKind
from auth_service.services._shared.ports import Claims, Principal, TokenProvider

USER_ID_CLAIM = "uid"
AUTHORITIES_CLAIM = "authorities"


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    Secret, algorithm and leeway come from the Flask config
    (``JWT_SECRET_KEY``, ``JWT_ALGORITHM``, ``JWT_DECODE_LEEWAY``); the
    lifetime defaults to ``JWT_ACCESS_TOKEN_EXPIRES`` unless ``access_expires``
    is given.

    .. note::
       Requires an active Flask app context with the JWT extension initialised.
    """

    access_expires: timedelta | None = None

    def _create(self, identity: str, claims: dict[str, Any]) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        return cast(
            str,
            _create_access(
                identity=identity,
                additional_claims=claims,
                expires_delta=self.access_expires,
            ),
        )

    def issue_access_token(self, principal: Principal) -> str:
        return self._create(
            principal.username,
            {
                USER_ID_CLAIM: principal.user_id,
                AUTHORITIES_CLAIM: list(principal.authorities),
            },
        )

    def issue_bare_token(self, username: str) -> str:
        # Refresh flow: the subject alone, no re-authentication.
        return self._create(username, {})

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify and decode ``token``.

        :raises TokenError: With the kind matching the PyJWT failure.
        """
        from flask_jwt_extended import decode_token

        try:
            return cast(dict[str, Any], decode_token(token))
        except pyjwt.ExpiredSignatureError as exc:
            raise TokenError(TokenErrorKind.EXPIRED, "Access token has expired") from exc
        except pyjwt.InvalidSignatureError as exc:
            raise TokenError(
                TokenErrorKind.BAD_SIGNATURE, "Access token signature is invalid"
            ) from exc
        except (pyjwt.InvalidTokenError, JWTExtendedException) as exc:
            raise TokenError(TokenErrorKind.MALFORMED, "Access token is malformed") from exc

    def parse(self, token: str) -> Claims:
        payload = self.decode(token)
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise TokenError(TokenErrorKind.MALFORMED, "Access token has no subject")

        raw_uid = payload.get(USER_ID_CLAIM)
        if raw_uid is not None and not isinstance(raw_uid, int):
            raise TokenError(TokenErrorKind.MALFORMED, "Access token user id is not an integer")

        return Claims(
            subject=subject,
            user_id=raw_uid,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            jti=str(payload.get("jti", "")),
            authorities=tuple(str(a) for a in payload.get(AUTHORITIES_CLAIM, ())),
        )

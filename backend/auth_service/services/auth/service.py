# auth_service/services/auth/service.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from auth_service.repositories.user import UserAccountRepository
from auth_service.services._shared.base import BaseService, ServiceContext
from auth_service.services._shared.errors import (
    InvalidCredentialsError,
    TokenError,
    TokenErrorKind,
    TokenRefreshError,
    TokenRefreshErrorKind,
    UsernameAlreadyExistsError,
    violates,
)
from auth_service.services._shared.ports import (
    AccessTokenStore,
    Principal,
    RefreshTokenStore,
    TokenProvider,
)
from auth_service.services.auth.credentials import CredentialVerifier
from auth_service.services.auth.dto import (
    JwtOut,
    MessageOut,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignOutOutcome,
    SignUpIn,
    TokenRefreshOut,
)

LOGGER = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
DEFAULT_AUTHORITIES: tuple[str, ...] = ("ROLE_USER",)


def extract_bearer(authorization: str | None) -> str | None:
    """
    Return the token of a ``Bearer <token>`` header value.

    :param authorization: Raw ``Authorization`` header.
    :returns: The token, or ``None`` if the header is missing or not a bearer header.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


class AuthService(BaseService):
    """
    Token lifecycle orchestrator (sign-in / sign-up / refresh / sign-out).

    Session states: ``Unauthenticated -> Authenticated -> (Refreshed)* -> SignedOut``.

    Each collaborator call is atomic on its own; the service never holds a
    transaction across two store calls.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        access_store: AccessTokenStore,
        refresh_store: RefreshTokenStore,
        verifier: CredentialVerifier | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for signing/parsing access tokens.
        :param access_store: Current access token per user.
        :param refresh_store: One live refresh token per user.
        :param verifier: Username/password checker.
        :param ctx: Request-scoped context (tracing).
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.access_store = access_store
        self.refresh_store = refresh_store
        self.verifier = verifier or CredentialVerifier(ro_uow=self.ro_uow)

    # ------------------------------------------------------------------ #
    # Sign-in
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn) -> JwtOut:
        """
        Authenticate credentials and open a new session.

        The new access token replaces the user's previous one, and a fresh
        refresh token supersedes any earlier refresh token.

        :raises InvalidCredentialsError: Nothing is issued or stored.
        """
        try:
            account = self.verifier.verify(dto.username, dto.password)
        except InvalidCredentialsError:
            LOGGER.info(
                "auth.signin",
                extra={"event": "auth.signin", "outcome": "invalid_credentials"},
            )
            raise

        principal = Principal(
            user_id=account.user_id,
            username=account.username,
            authorities=DEFAULT_AUTHORITIES,
        )
        access_token = self.tokens.issue_access_token(principal)
        self.access_store.record_active(account.user_id, access_token)
        refresh = self.refresh_store.create(access_token, account.user_id)

        LOGGER.info(
            "auth.signin",
            extra={"event": "auth.signin", "user_id": account.user_id, "outcome": "ok"},
        )
        return JwtOut(
            access_token=access_token,
            refresh_token=refresh.token,
            user_id=account.user_id,
            username=account.username,
        )

    # ------------------------------------------------------------------ #
    # Sign-up
    # ------------------------------------------------------------------ #

    def sign_up(self, dto: SignUpIn) -> MessageOut:
        """
        Register an account. No token is issued.

        :raises UsernameAlreadyExistsError: Also when a concurrent sign-up
            wins the race on the unique constraint.
        """
        with self.rw_uow() as uow:
            repo: UserAccountRepository = uow.users

            if repo.exists_by_username(dto.username):
                raise UsernameAlreadyExistsError(dto.username)

            try:
                user = repo.add(repo.model(username=dto.username, password=dto.password))
                user_id = user.id
            except IntegrityError as exc:
                # PostgreSQL names the constraint, SQLite names the column
                if violates(exc, "uq_user_auth_username") or violates(
                    exc, "user_auth.username"
                ):
                    raise UsernameAlreadyExistsError(dto.username) from exc
                raise

        LOGGER.info("auth.signup", extra={"event": "auth.signup", "user_id": user_id})
        return MessageOut(message="User registered successfully!")

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenRefreshOut:
        """
        Exchange a refresh token for a new access token.

        The refresh token value itself is not rotated and comes back unchanged.

        :raises TokenRefreshError: ``NOT_FOUND`` (nothing mutated) or
            ``EXPIRED`` (the stored row is gone afterwards).
        """
        try:
            view = self.refresh_store.find_by_token(dto.refresh_token)
            if view is None:
                raise TokenRefreshError(dto.refresh_token, TokenRefreshErrorKind.NOT_FOUND)
            view = self.refresh_store.verify_expiration(view)

            with self.ro_uow() as uow:
                user = uow.users.get(view.user_id)
                if user is None:
                    raise TokenRefreshError(dto.refresh_token, TokenRefreshErrorKind.NOT_FOUND)
                user_id, username = user.id, user.username
        except TokenRefreshError as exc:
            LOGGER.info(
                "auth.refresh",
                extra={"event": "auth.refresh", "outcome": f"refresh_token_{exc.kind.value}"},
            )
            raise

        access_token = self.tokens.issue_bare_token(username)
        self.access_store.record_active(user_id, access_token)

        LOGGER.info(
            "auth.refresh", extra={"event": "auth.refresh", "user_id": user_id, "outcome": "ok"}
        )
        return TokenRefreshOut(access_token=access_token, refresh_token=dto.refresh_token)

    # ------------------------------------------------------------------ #
    # Sign-out
    # ------------------------------------------------------------------ #

    def sign_out(self, dto: SignOutIn) -> SignOutOutcome:
        """
        End the caller's session.

        Never raises for the negative cases: each one is a :class:`SignOutOutcome`.
        On success the user's refresh token is deleted and the access token
        row is kept but marked inactive.
        """
        outcome = self._sign_out(dto)
        LOGGER.info(
            "auth.signout",
            extra={
                "event": "auth.signout",
                "user_id": dto.principal.user_id if dto.principal else None,
                "outcome": outcome.name.lower(),
            },
        )
        return outcome

    def _sign_out(self, dto: SignOutIn) -> SignOutOutcome:
        principal = dto.principal
        if principal is None or principal.anonymous:
            return SignOutOutcome.NOT_AUTHENTICATED

        token = extract_bearer(dto.authorization)
        if token is None:
            return SignOutOutcome.INVALID_HEADER

        if self.access_store.find_by_token(token) is None:
            return SignOutOutcome.TOKEN_NOT_FOUND

        self.refresh_store.delete_by_user_id(principal.user_id)
        self.access_store.deactivate(token)
        return SignOutOutcome.SUCCESS

    # ------------------------------------------------------------------ #
    # Principal resolution
    # ------------------------------------------------------------------ #

    def resolve_principal(self, token: str, *, require_active_session: bool = False) -> Principal:
        """
        Turn a bearer token into a :class:`Principal`.

        Bare (refresh-derived) tokens carry no user id; it is looked up by
        username.

        :param token: Raw access token.
        :param require_active_session: Also require the token to be the
            user's current active token.
        :raises TokenError: Invalid token, unknown subject, or (when required)
            a token that is no longer the active session.
        """
        claims = self.tokens.parse(token)
        user_id = claims.user_id
        if user_id is None:
            with self.ro_uow() as uow:
                user = uow.users.get_by_username(claims.subject)
                if user is None:
                    raise TokenError(TokenErrorKind.MALFORMED, "Access token subject is unknown")
                user_id = user.id

        if require_active_session:
            record = self.access_store.find_by_user_id_and_token(user_id, token)
            if record is None or not record.is_active:
                raise TokenError(TokenErrorKind.REVOKED, "Access token is no longer active")

        return Principal(
            user_id=user_id,
            username=claims.subject,
            authorities=claims.authorities or DEFAULT_AUTHORITIES,
        )

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #

    def revoke_user(self, user_id: int) -> bool:
        """
        Force a logout: deactivate the user's access token and drop their refresh token.

        :returns: ``True`` if anything was revoked.
        """
        record = self.access_store.find_by_user_id(user_id)
        deactivated = False
        if record is not None and record.is_active:
            deactivated = self.access_store.deactivate(record.token)
        removed = self.refresh_store.delete_by_user_id(user_id)
        LOGGER.info(
            "auth.revoke",
            extra={"event": "auth.revoke", "user_id": user_id, "outcome": str(removed)},
        )
        return deactivated or removed > 0

    def purge_expired_refresh_tokens(self, now: datetime | None = None) -> int:
        """Delete every expired refresh token. :returns: Number removed."""
        removed = self.refresh_store.purge_expired(now or self.now_utc())
        LOGGER.info("auth.purge", extra={"event": "auth.purge", "outcome": str(removed)})
        return removed

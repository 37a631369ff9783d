from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Protocol


@dataclass(frozen=True, slots=True)
class TokenRecord:
    """
    Read-model of a user's current access token row.

    :ivar token: Raw access token string.
    :ivar user_id: Owner user id (unique across records).
    :ivar is_active: ``False`` once the session was signed out.
    """

    token: str
    user_id: int
    is_active: bool


class AccessTokenStore(Protocol):
    """
    Records the currently valid access token per user.

    Holds at most one record per ``user_id``: recording a new token replaces
    the previous one, last writer wins. Every operation is atomic on its own.
    """

    def record_active(self, user_id: int, token: str) -> TokenRecord:
        """Upsert the single active record for ``user_id``."""
        ...

    def find_by_token(self, token: str) -> TokenRecord | None: ...

    def find_by_user_id(self, user_id: int) -> TokenRecord | None: ...

    def find_by_user_id_and_token(self, user_id: int, token: str) -> TokenRecord | None: ...

    def deactivate(self, token: str) -> bool:
        """Soft-revoke ``token``; the record is retained. :returns: True if it existed."""
        ...

    def delete_by_token(self, token: str) -> bool:
        """Hard-delete the record holding ``token``. :returns: True if it existed."""
        ...


class InMemoryAccessTokenStore(AccessTokenStore):
    """
    In-memory access token store keyed by user id.

    .. note::
       Uses a threading lock so each call is atomic, mirroring a single
       statement against the relational table.
    """

    def __init__(self) -> None:
        self._by_user: dict[int, TokenRecord] = {}
        self._lock = threading.Lock()

    def _find_token(self, token: str) -> TokenRecord | None:
        for record in self._by_user.values():
            if record.token == token:
                return record
        return None

    def record_active(self, user_id: int, token: str) -> TokenRecord:
        with self._lock:
            record = TokenRecord(token=token, user_id=user_id, is_active=True)
            self._by_user[user_id] = record
            return record

    def find_by_token(self, token: str) -> TokenRecord | None:
        with self._lock:
            return self._find_token(token)

    def find_by_user_id(self, user_id: int) -> TokenRecord | None:
        with self._lock:
            return self._by_user.get(user_id)

    def find_by_user_id_and_token(self, user_id: int, token: str) -> TokenRecord | None:
        with self._lock:
            record = self._by_user.get(user_id)
            if record is None or record.token != token:
                return None
            return record

    def deactivate(self, token: str) -> bool:
        with self._lock:
            record = self._find_token(token)
            if record is None:
                return False
            self._by_user[record.user_id] = replace(record, is_active=False)
            return True

    def delete_by_token(self, token: str) -> bool:
        with self._lock:
            record = self._find_token(token)
            if record is None:
                return False
            del self._by_user[record.user_id]
            return True

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import uuid4

from justping.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    TokenInvalidError,
)


@dataclass(frozen=True, slots=True)
class ExternalUserRef:
    """
    Handle on an account held by the identity provider.

    :ivar uid: Provider-side user id (stored as ``firebase_uid``).
    :ivar email: Email the account was created with.
    """

    uid: str
    email: str


@dataclass(frozen=True, slots=True)
class AuthResult:
    """
    Successful password authentication.

    :ivar uid: Provider-side user id.
    :ivar email: Email echoed by the provider.
    :ivar id_token: Provider ID token, if one was minted.
    """

    uid: str
    email: str
    id_token: str | None = None


class IdentityProvider(Protocol):
    """
    Port for the external service that holds the canonical password credential.

    Adapters translate every provider failure into the service-layer error
    taxonomy: rejected credentials raise :class:`InvalidCredentialsError`,
    bad ID tokens raise :class:`TokenInvalidError`, duplicate accounts raise
    :class:`ConflictError`, unknown accounts raise :class:`NotFoundError` and
    anything else raises ``IdentityProviderError``.
    """

    def create_user(self, *, email: str, password: str, display_name: str) -> ExternalUserRef: ...

    def authenticate(self, email: str, password: str) -> AuthResult: ...

    def update_password(self, uid: str, new_password: str) -> None: ...

    def verify_id_token(self, id_token: str) -> dict[str, Any]: ...

    def generate_password_reset_link(self, email: str) -> str: ...

    def delete_user(self, uid: str) -> None: ...


@dataclass(slots=True)
class _Account:
    uid: str
    email: str
    password: str
    display_name: str
    disabled: bool = False
    id_tokens: set[str] = field(default_factory=set)


class InMemoryIdentityProvider(IdentityProvider):
    """
    Dict-backed identity provider for development and tests.

    ID tokens are opaque strings minted by :meth:`issue_id_token`.
    """

    def __init__(self) -> None:
        self._by_uid: dict[str, _Account] = {}
        self._uid_by_email: dict[str, str] = {}
        self._uid_by_token: dict[str, str] = {}
        self._lock = threading.Lock()
        self.deleted_uids: list[str] = []

    # ------------------------- helpers -------------------------

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def _account(self, uid: str) -> _Account:
        account = self._by_uid.get(uid)
        if account is None:
            raise NotFoundError("IdentityAccount", uid)
        return account

    def password_of(self, email: str) -> str | None:
        """Return the stored password for ``email`` (test inspection only)."""
        uid = self._uid_by_email.get(self._key(email))
        return self._by_uid[uid].password if uid else None

    def disable(self, email: str) -> None:
        uid = self._uid_by_email[self._key(email)]
        self._by_uid[uid].disabled = True

    def issue_id_token(self, uid: str) -> str:
        """Mint an ID token accepted by :meth:`verify_id_token`."""
        with self._lock:
            account = self._account(uid)
            token = f"idt-{uuid4().hex}"
            account.id_tokens.add(token)
            self._uid_by_token[token] = uid
            return token

    # -------------------------- API ----------------------------

    def create_user(self, *, email: str, password: str, display_name: str) -> ExternalUserRef:
        with self._lock:
            key = self._key(email)
            if key in self._uid_by_email:
                raise ConflictError("IdentityAccount", "Email already exists")
            uid = uuid4().hex[:28]
            self._by_uid[uid] = _Account(uid=uid, email=key, password=password, display_name=display_name)
            self._uid_by_email[key] = uid
            return ExternalUserRef(uid=uid, email=key)

    def authenticate(self, email: str, password: str) -> AuthResult:
        uid = self._uid_by_email.get(self._key(email))
        account = self._by_uid.get(uid) if uid else None
        if account is None or account.disabled or account.password != password:
            raise InvalidCredentialsError()
        return AuthResult(uid=account.uid, email=account.email, id_token=self.issue_id_token(account.uid))

    def update_password(self, uid: str, new_password: str) -> None:
        with self._lock:
            self._account(uid).password = new_password

    def verify_id_token(self, id_token: str) -> dict[str, Any]:
        uid = self._uid_by_token.get(id_token)
        if uid is None or uid not in self._by_uid:
            raise TokenInvalidError()
        account = self._by_uid[uid]
        return {"uid": uid, "sub": uid, "email": account.email}

    def generate_password_reset_link(self, email: str) -> str:
        uid = self._uid_by_email.get(self._key(email))
        if uid is None:
            raise NotFoundError("IdentityAccount", email)
        return f"https://identity.invalid/reset?oobCode={uuid4().hex}"

    def delete_user(self, uid: str) -> None:
        with self._lock:
            account = self._by_uid.pop(uid, None)
            if account is None:
                raise NotFoundError("IdentityAccount", uid)
            self._uid_by_email.pop(account.email, None)
            for token in account.id_tokens:
                self._uid_by_token.pop(token, None)
            self.deleted_uids.append(uid)

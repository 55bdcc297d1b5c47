"""
Firebase Authentication adapter for the :class:`IdentityProvider` port.

Account management and ID-token checks go through the Firebase Admin SDK.
Password verification uses the Identity Toolkit REST endpoint, the only
Firebase API that accepts an email/password pair server-side.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import firebase_admin
import requests
from firebase_admin import auth as fb_auth
from firebase_admin import credentials
from firebase_admin import exceptions as fb_exceptions

from justping.core.logger import redact_email
from justping.services._shared.errors import (
    ConflictError,
    IdentityProviderError,
    InvalidCredentialsError,
    NotFoundError,
    TokenInvalidError,
)
from justping.services._shared.ports.identity_provider import (
    AuthResult,
    ExternalUserRef,
    IdentityProvider,
)

log = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
FIREBASE_APP_NAME = "justping"

# REST error codes that mean "the credentials were rejected"
_CREDENTIAL_ERRORS = frozenset(
    {
        "EMAIL_NOT_FOUND",
        "INVALID_PASSWORD",
        "INVALID_LOGIN_CREDENTIALS",
        "INVALID_EMAIL",
        "MISSING_PASSWORD",
        "USER_DISABLED",
    }
)


class FirebaseIdentityProvider(IdentityProvider):
    """
    Firebase-backed identity provider.

    :param api_key: Web API key used for the REST sign-in call.
    :param credentials_file: Service-account JSON path; application default
        credentials are used when empty.
    :param project_id: Optional explicit project id.
    :param timeout: Seconds allowed for every outbound call.
    :param session: Optional :class:`requests.Session` (tests inject one).
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        credentials_file: str | None = None,
        project_id: str | None = None,
        timeout: int = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key or ""
        self.credentials_file = credentials_file
        self.project_id = project_id
        self.timeout = timeout
        self.http = session or requests.Session()
        self._app: firebase_admin.App | None = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> FirebaseIdentityProvider:
        return cls(
            api_key=config.get("FIREBASE_API_KEY"),
            credentials_file=config.get("FIREBASE_CREDENTIALS_FILE"),
            project_id=config.get("FIREBASE_PROJECT_ID"),
            timeout=int(config.get("IDENTITY_PROVIDER_TIMEOUT", 10)),
        )

    # ------------------------------------------------------------------ #
    # SDK bootstrap
    # ------------------------------------------------------------------ #

    @property
    def app(self) -> firebase_admin.App:
        """Named Admin SDK app, initialized on first use."""
        if self._app is None:
            try:
                self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
            except ValueError:
                cred = (
                    credentials.Certificate(self.credentials_file)
                    if self.credentials_file
                    else credentials.ApplicationDefault()
                )
                options: dict[str, Any] = {"httpTimeout": self.timeout}
                if self.project_id:
                    options["projectId"] = self.project_id
                self._app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
                log.info("Firebase Admin SDK initialized")
        return self._app

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def create_user(self, *, email: str, password: str, display_name: str) -> ExternalUserRef:
        try:
            record = fb_auth.create_user(
                email=email, password=password, display_name=display_name or None, app=self.app
            )
        except fb_auth.EmailAlreadyExistsError as exc:
            raise ConflictError("IdentityAccount", "Business already exists with this email") from exc
        except (fb_exceptions.FirebaseError, ValueError) as exc:
            log.error("Identity account creation failed for %s: %s", redact_email(email), exc)
            raise IdentityProviderError() from exc
        return ExternalUserRef(uid=record.uid, email=record.email or email)

    def authenticate(self, email: str, password: str) -> AuthResult:
        if not self.api_key:
            raise IdentityProviderError("Identity provider API key is not configured")
        try:
            response = self.http.post(
                SIGN_IN_URL,
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.warning("Identity sign-in request failed: %s", exc.__class__.__name__)
            raise IdentityProviderError() from exc

        if response.ok:
            body = response.json()
            return AuthResult(
                uid=body["localId"], email=body.get("email", email), id_token=body.get("idToken")
            )

        code = self._error_code(response)
        if code in _CREDENTIAL_ERRORS or code.startswith("TOO_MANY_ATTEMPTS"):
            raise InvalidCredentialsError()
        log.error("Identity sign-in rejected with %s (HTTP %s)", code or "unknown", response.status_code)
        raise IdentityProviderError()

    def update_password(self, uid: str, new_password: str) -> None:
        try:
            fb_auth.update_user(uid, password=new_password, app=self.app)
        except fb_auth.UserNotFoundError as exc:
            raise NotFoundError("IdentityAccount", uid) from exc
        except (fb_exceptions.FirebaseError, ValueError) as exc:
            log.error("Identity password update failed: %s", exc)
            raise IdentityProviderError() from exc

    def verify_id_token(self, id_token: str) -> dict[str, Any]:
        if not id_token or not id_token.startswith("eyJ"):
            raise TokenInvalidError()
        try:
            return dict(fb_auth.verify_id_token(id_token, app=self.app))
        except (fb_auth.InvalidIdTokenError, fb_auth.UserDisabledError, ValueError) as exc:
            raise TokenInvalidError() from exc
        except fb_exceptions.FirebaseError as exc:
            log.error("ID token verification failed: %s", exc)
            raise IdentityProviderError() from exc

    def generate_password_reset_link(self, email: str) -> str:
        try:
            return str(fb_auth.generate_password_reset_link(email, app=self.app))
        except fb_auth.UserNotFoundError as exc:
            raise NotFoundError("IdentityAccount", email) from exc
        except (fb_exceptions.FirebaseError, ValueError) as exc:
            log.error("Reset link generation failed for %s: %s", redact_email(email), exc)
            raise IdentityProviderError() from exc

    def delete_user(self, uid: str) -> None:
        try:
            fb_auth.delete_user(uid, app=self.app)
        except fb_auth.UserNotFoundError as exc:
            raise NotFoundError("IdentityAccount", uid) from exc
        except (fb_exceptions.FirebaseError, ValueError) as exc:
            log.error("Identity account deletion failed: %s", exc)
            raise IdentityProviderError() from exc

    # ------------------------------------------------------------------ #

    @staticmethod
    def _error_code(response: requests.Response) -> str:
        """Extract ``error.message`` (e.g. ``"INVALID_PASSWORD : ..."``) from a REST failure."""
        try:
            message = str(response.json()["error"]["message"])
        except (ValueError, KeyError, TypeError):
            return ""
        return message.split(":", 1)[0].strip()

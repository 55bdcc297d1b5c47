"""Random secrets handed to users out-of-band: throwaway passwords and reset tokens."""

from __future__ import annotations

import hashlib
import secrets

TEMP_PASSWORD_BYTES = 16
RESET_TOKEN_BYTES = 32


def generate_temp_password() -> str:
    """Random password for a freshly created identity account; never shown to anyone."""
    return secrets.token_hex(TEMP_PASSWORD_BYTES)


def hash_reset_token(raw_token: str) -> str:
    """SHA-256 hex digest stored in place of the raw reset token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_reset_token() -> tuple[str, str]:
    """
    Create a reset token.

    :returns: ``(raw, digest)``. Only the digest is persisted; the raw value
        travels in the emailed link.
    """
    raw = secrets.token_hex(RESET_TOKEN_BYTES)
    return raw, hash_reset_token(raw)

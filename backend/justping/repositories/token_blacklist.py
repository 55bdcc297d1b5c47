"""Token blacklist repository."""

from __future__ import annotations

import hashlib
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from justping.models.base import utcnow
from justping.models.token_blacklist import TokenBlacklist
from justping.repositories.base import BaseRepository


def token_digest(token: str) -> str:
    """Return the SHA-256 hex digest used as the blacklist lookup key."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenBlacklistRepository(BaseRepository[TokenBlacklist]):
    """Append-only access to revoked access tokens."""

    model = TokenBlacklist

    def add_token(self, token: str, expires_at: datetime) -> bool:
        """
        Insert a revoked token; a second insert of the same token is a no-op.

        :param token: Raw access-token string.
        :param expires_at: Decoded ``exp`` of the token.
        :returns: ``True`` if a row was written, ``False`` if already present.
        """
        entry = TokenBlacklist(token=token, token_hash=token_digest(token), expires_at=expires_at)
        try:
            with self.session.begin_nested():
                self.session.add(entry)
                self.session.flush()
        except IntegrityError:
            return False
        return True

    def contains(self, token: str) -> bool:
        """Point lookup: is this exact token string blacklisted?"""
        stmt = select(TokenBlacklist.id).where(TokenBlacklist.token_hash == token_digest(token))
        return self.session.execute(stmt).first() is not None

    def purge_expired(self, *, now: datetime | None = None) -> int:
        """Delete entries whose ``expires_at`` has passed. :returns: rows deleted."""
        result = self.session.execute(
            delete(TokenBlacklist).where(TokenBlacklist.expires_at <= (now or utcnow()))
        )
        return int(result.rowcount or 0)

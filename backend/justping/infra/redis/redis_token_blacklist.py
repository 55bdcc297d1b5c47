from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from justping.repositories.token_blacklist import token_digest


class RedisTokenBlacklist:
    """
    Access-token blacklist keyed by the SHA-256 of the raw token.

    Entries carry a TTL equal to the token's remaining lifetime, so Redis
    does the purge.
    """

    def __init__(self, r: redis.Redis):
        self.r = r

    @staticmethod
    def _k(token: str) -> str:
        return f"blacklist:at:{token_digest(token)}"

    def add(self, token: str, expires_at: datetime) -> None:
        now = datetime.now(UTC).timestamp()
        ttl = max(1, int(expires_at.timestamp() - now))
        # NX keeps the first write; idempotent
        self.r.set(self._k(token), "1", ex=ttl, nx=True)

    def contains(self, token: str) -> bool:
        return cast(int, self.r.exists(self._k(token))) == 1

    def purge_expired(self) -> int:
        # Keys expire on their own.
        return 0

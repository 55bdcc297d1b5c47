from __future__ import annotations

from datetime import datetime

from justping.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class SQLTokenBlacklist:
    """
    Blacklist stored in the ``token_blacklist`` table.

    Each call runs in its own unit of work so a logout commits even when no
    other write happens in the request.
    """

    def add(self, token: str, expires_at: datetime) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            uow.token_blacklist.add_token(token, expires_at)

    def contains(self, token: str) -> bool:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            return uow.token_blacklist.contains(token)

    def purge_expired(self) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.token_blacklist.purge_expired()

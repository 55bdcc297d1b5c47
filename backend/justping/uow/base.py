"""Unit of Work contract the services depend on."""

from __future__ import annotations

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    One transactional boundary per use case.

    Implementations expose ``businesses``, ``users``, ``roles`` and
    ``token_blacklist`` repositories bound to the same transaction.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...

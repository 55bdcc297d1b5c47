"""
Shared base for the persistence-only repositories.

Repositories read and stage rows; they never commit or roll back (the
Unit of Work owns the transaction) and never call the identity provider.
Writes that race under concurrency (token version, blacklist, role
upserts) live in the concrete repositories as single statements.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from justping.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Primary-key access and whitelisted updates for one mapped class.

    Subclasses set ``model`` and may override:

    * ``_default_eagerload`` to attach loader options to :meth:`get`.
    * ``_updatable_fields`` to allow keys through :meth:`update`.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session of the enclosing Unit of Work; defaults to
            the Flask-scoped ``db.session``.
        """
        self._session = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _updatable_fields(self) -> set[str]:
        return set()

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so server defaults and ids are populated."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def get(self, entity_id: str) -> E | None:
        stmt = self._default_eagerload(select(self.model).where(self.model.id == entity_id))  # type: ignore[attr-defined]
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def flush(self) -> None:
        self.session.flush()

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign whitelisted attributes and flush.

        Assignment goes through ``setattr`` so the model's ``@validates``
        hooks run.

        :raises ValueError: If any key is outside ``_updatable_fields``.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Fields not updatable on {self.model.__name__}: {rejected}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.flush()
        return instance

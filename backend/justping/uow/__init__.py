"""Unit of Work abstractions and the SQLAlchemy implementations.

Services open a :class:`SQLAlchemyUnitOfWork` around every multi-write use
case (registration, password reset, logout-everywhere) and a
:class:`SQLAlchemyReadOnlyUnitOfWork` for lookups.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]

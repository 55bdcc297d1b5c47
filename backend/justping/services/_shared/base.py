"""Base class and request context shared by the application services."""

from __future__ import annotations

from dataclasses import dataclass

from justping.services._shared.errors import AuthorizationError
from justping.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, tenant, request ids).

    :param actor_id: Authenticated business-user identifier.
    :param business_id: Tenant the actor belongs to.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: str | None = None
    business_id: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer the shared tenant-scoping guard.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - ORM instances loaded in a read-only UoW are expired on exit; build
      output DTOs inside the ``with`` block.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tenant, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # --------------------------- AuthZ --------------------------------------

    def ensure_same_business(self, business_id: str, *, msg: str | None = None) -> None:
        """
        Ensure the current actor belongs to ``business_id``.

        :param business_id: Tenant that owns the resource being touched.
        :type business_id: str
        :param msg: Optional custom error message.
        :type msg: str | None
        :raises AuthorizationError: If the actor is scoped to another business.
        """
        from justping.services._shared.policies.common import is_same_business

        if not is_same_business(actor_business_id=self.ctx.business_id, business_id=business_id):
            raise AuthorizationError(msg or "Access denied for this business")


"""Role repository: tenant roles and user↔role links."""

from __future__ import annotations

import copy
from typing import cast

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from justping.models.business_user import business_user_role
from justping.models.role import ADMIN_PERMISSIONS, ADMIN_ROLE_NAME, PermissionMap, Role
from justping.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Persistence-only repository for :class:`Role`."""

    model = Role

    def get_by_name(self, business_id: str, name: str) -> Role | None:
        """Return the role called ``name`` in a business, if any."""
        stmt = select(Role).where(Role.business_id == business_id, Role.name == name)
        return cast(Role | None, self.session.execute(stmt).scalars().first())

    def get_or_create(
        self,
        business_id: str,
        name: str,
        *,
        permissions: PermissionMap,
        description: str | None = None,
    ) -> Role:
        """
        Insert-or-reselect a role on the ``(business_id, name)`` unique key.

        The insert is attempted inside a SAVEPOINT; if a concurrent writer
        already created the row, the unique constraint fires, the savepoint
        is rolled back and the existing row is returned.

        :param business_id: Owning business.
        :param name: Role name, unique per business.
        :param permissions: Permission map stored on first creation only.
        :param description: Optional description stored on first creation only.
        :returns: Existing or newly created role.
        """
        existing = self.get_by_name(business_id, name)
        if existing is not None:
            return existing

        role = Role(
            business_id=business_id,
            name=name,
            description=description,
            permissions=copy.deepcopy(permissions),
        )
        try:
            with self.session.begin_nested():
                self.session.add(role)
                self.session.flush()
        except IntegrityError:
            winner = self.get_by_name(business_id, name)
            if winner is None:
                raise
            return winner
        return role

    def get_or_create_admin_role(self, business_id: str) -> Role:
        """Return the business' ``Admin`` role, creating it with full access."""
        return self.get_or_create(
            business_id,
            ADMIN_ROLE_NAME,
            permissions=ADMIN_PERMISSIONS,
            description="Full access to every console module",
        )

    def assign_to_user(self, user_id: str, role_id: str) -> None:
        """Relate a user to a role; a repeated assignment is a no-op."""
        linked = self.session.execute(
            select(business_user_role.c.user_id).where(
                business_user_role.c.user_id == user_id,
                business_user_role.c.role_id == role_id,
            )
        ).first()
        if linked is not None:
            return
        self.session.execute(insert(business_user_role).values(user_id=user_id, role_id=role_id))

    def get_user_roles(self, user_id: str) -> list[Role]:
        """Return every role held by a user, ordered by name."""
        stmt = (
            select(Role)
            .join(business_user_role, business_user_role.c.role_id == Role.id)
            .where(business_user_role.c.user_id == user_id)
            .order_by(Role.name, Role.id)
        )
        return list(self.session.execute(stmt).scalars().all())
